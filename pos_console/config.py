# ==============================================================================
# CONFIGURACIÓN DE LA CONSOLA
# ==============================================================================
# Todos los valores se leen de variables de entorno con un valor por defecto
# apto para desarrollo local.
#
#   export POS_API_URL="http://192.168.1.20:3000"
#   export POS_SECRET_KEY="clave_larga_y_aleatoria"
# ==============================================================================

import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'si', 'sí')


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


BASE = os.path.dirname(os.path.abspath(__file__))

# ═══════════════════════════════════════════════════════════════════════════════
# MODO PRODUCCIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# True = exige POS_SECRET_KEY y desactiva mensajes de depuración
PRODUCTION_MODE = _env_bool('POS_PRODUCTION_MODE', False)

# ═══════════════════════════════════════════════════════════════════════════════
# BACKEND REST
# ═══════════════════════════════════════════════════════════════════════════════
# Puerto por defecto del backend REST
BACKEND_PORT = '3000'
API_BASE_URL = os.environ.get('POS_API_URL', f'http://localhost:{BACKEND_PORT}').rstrip('/')

# ═══════════════════════════════════════════════════════════════════════════════
# BÚSQUEDA (typeahead)
# ═══════════════════════════════════════════════════════════════════════════════
SEARCH_DEBOUNCE_MS = _env_int('POS_SEARCH_DEBOUNCE_MS', 500)
SEARCH_MIN_CHARS = _env_int('POS_SEARCH_MIN_CHARS', 2)

# ═══════════════════════════════════════════════════════════════════════════════
# SESIÓN FLASK
# ═══════════════════════════════════════════════════════════════════════════════
_DEFAULT_SECRET = 'pos_console_dev_secret_key_change_in_production'
SECRET_KEY = os.environ.get('POS_SECRET_KEY') or _DEFAULT_SECRET
SECRET_KEY_IS_DEFAULT = 'POS_SECRET_KEY' not in os.environ

SESSION_SETTINGS = dict(
    SESSION_COOKIE_HTTPONLY=True,      # Protege contra XSS
    SESSION_COOKIE_SECURE=False,       # False para HTTP local (True solo para HTTPS)
    SESSION_COOKIE_SAMESITE='Lax',
    PERMANENT_SESSION_LIFETIME=86400,  # 24 horas
)

# ═══════════════════════════════════════════════════════════════════════════════
# LOGS
# ═══════════════════════════════════════════════════════════════════════════════
LOGS_DIR = os.environ.get('POS_LOGS_DIR', os.path.join(BASE, 'logs'))
ENABLE_PROFILING = _env_bool('POS_ENABLE_PROFILING', True)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVIDOR DE DESARROLLO
# ═══════════════════════════════════════════════════════════════════════════════
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
PORT = _env_int('FLASK_PORT', 5000)
