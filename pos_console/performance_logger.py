# ==============================================================================
# SISTEMA DE PROFILING Y LOG DE ERRORES
# ==============================================================================
# Mide rendimiento de rutas de la consola y de llamadas al backend REST.
# Guarda logs legibles en /logs/ para análisis humano:
#   - performance.log     → cada ruta atendida
#   - slow_routes.log     → rutas que superan los umbrales
#   - slow_functions.log  → llamadas lentas al backend
#   - errors.log          → fallos de búsqueda, referencias y envíos
#
# ACTIVAR/DESACTIVAR: variable de entorno POS_ENABLE_PROFILING
# ==============================================================================

import os
import time
import threading
from datetime import datetime
from functools import wraps

from pos_console import config

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = config.ENABLE_PROFILING

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

LOGS_DIR = config.LOGS_DIR

PERFORMANCE_LOG = os.path.join(LOGS_DIR, 'performance.log')
SLOW_ROUTES_LOG = os.path.join(LOGS_DIR, 'slow_routes.log')
SLOW_FUNCTIONS_LOG = os.path.join(LOGS_DIR, 'slow_functions.log')
ERRORS_LOG = os.path.join(LOGS_DIR, 'errors.log')

# Nombres legibles de las rutas de la consola
ROUTE_NAMES = {
    'POST /login': 'Iniciar sesión',
    'POST /logout': 'Cerrar sesión',

    'GET /api/borrador': 'Ver borrador',
    'POST /api/borrador/tipo': 'Cambiar tipo de transacción',
    'POST /api/borrador/punto-venta': 'Cambiar punto de venta',
    'POST /api/borrador/campos': 'Editar campos del borrador',
    'POST /api/borrador/items': 'Agregar ítem',
    'POST /api/borrador/items/cantidad': 'Cambiar cantidad',
    'POST /api/borrador/items/eliminar': 'Eliminar ítem',
    'POST /api/borrador/cancelar': 'Descartar borrador',
    'POST /api/borrador/confirmar': 'Enviar transacción',

    'GET /api/buscar': 'Buscar productos',
    'GET /api/puntos-venta': 'Ver puntos de venta',
    'GET /api/transacciones': 'Ver historial de transacciones',
}

_write_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# ESCRITURA DE LOGS
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp():
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _write_log(filepath, content):
    """Agrega contenido a un archivo de log (thread-safe)."""
    try:
        with _write_lock:
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
            with open(filepath, 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        pass  # Un log que no se puede escribir no debe tumbar la consola


def _get_route_name(method, path, rule=None):
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return f"{method} {path}"


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ LOG DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════

def log_error(context, error, details=None):
    """
    Registra un error no fatal en errors.log.

    Args:
        context: Qué se estaba haciendo ("Búsqueda de inventario", ...)
        error: Excepción o mensaje
        details: Diccionario con datos adicionales (opcional)
    """
    lines = [
        '',
        '════════════════════════════════════════',
        f'[ERROR] {_get_timestamp()}',
        '────────────────────────────────────────',
        f'Acción: {context}',
        f'Error: {error}',
    ]
    status = getattr(error, 'status', None)
    if status is not None:
        lines.append(f'Estado HTTP: {status}')
    for key, value in (details or {}).items():
        lines.append(f'{key}: {value}')
    _write_log(ERRORS_LOG, '\n'.join(lines) + '\n')


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ PROFILING DE RUTAS (Middleware Flask)
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    if not ENABLE_PROFILING:
        return

    action_name = _get_route_name(method, path, rule)
    user_str = user or 'anónimo'

    log_entry = f"""
════════════════════════════════════════
[PERFORMANCE] {_get_timestamp()}
────────────────────────────────────────
Acción: {action_name}
Usuario: {user_str}
Ruta: {method} {path}
Tiempo: {time_ms:.0f} ms
"""
    _write_log(PERFORMANCE_LOG, log_entry)


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    """
    Registra una ruta lenta en slow_routes.log

    Args:
        level: 'WARNING' (>300ms) o 'CRITICAL' (>700ms)
    """
    if not ENABLE_PROFILING:
        return

    action_name = _get_route_name(method, path, rule)
    user_str = user or 'anónimo'
    severity = 'LENTA' if level == 'WARNING' else 'MUY LENTA'
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL

    log_entry = f"""
[{level}] {_get_timestamp()}
────────────────────────────────────────
Ruta {severity}: {action_name}
Usuario: {user_str}
Detalle: {method} {path}
Tiempo: {time_ms:.0f} ms (umbral: {threshold} ms)
────────────────────────────────────────
"""
    _write_log(SLOW_ROUTES_LOG, log_entry)


def init_profiling(app):
    """
    Registra hooks before_request / after_request en la app Flask.

    Uso:
        from pos_console.performance_logger import init_profiling
        init_profiling(app)
    """
    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000

        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path
        user = session.get('user')

        if path.startswith('/static'):
            return response

        log_route_performance(method, path, rule, elapsed, user)

        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, user, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ DECORADOR PARA LLAMADAS AL BACKEND
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir llamadas al backend.

    Uso:
        @profile_function
        def list_products(self):
            ...

        @profile_function(name="Enviar transacción")
        def submit_bulk(self, payload):
            ...
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn

        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    severity = 'CRÍTICO' if time_ms >= THRESHOLD_CRITICAL else 'LENTO'

    log_entry = f"""
[{severity}] {_get_timestamp()}
Función: {func_name}
Tiempo: {time_ms:.0f} ms
────────────────────────────────────────
"""
    _write_log(SLOW_FUNCTIONS_LOG, log_entry)


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'profile_function',
    'log_error',
]
