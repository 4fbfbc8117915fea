# ==============================================================================
# CONSOLA DE TRANSACCIONES DE INVENTARIO - Aplicación Flask
# ==============================================================================
# Superficie JSON de la consola. Las rutas solo traducen la petición HTTP a
# llamadas de servicios; la lógica vive en services/.
#
# Todas las rutas /api/* responden SIEMPRE JSON, nunca HTML ni redirect.
# ==============================================================================

from functools import wraps

from flask import Flask, request, session

from pos_console import config
from pos_console.exceptions import (
    ApiError,
    AuthenticationExpiredError,
    DraftValidationError,
    SubmissionError,
    SubmissionInProgressError,
)
from pos_console.models import (
    TRANSACTION_TYPE_INFO,
    CandidateItem,
    allowed_transaction_types,
)
from pos_console.performance_logger import init_profiling, log_error
from pos_console.repositories import decode_token_role
from pos_console.services import resolve_date_range

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
from pos_console.app_container import SEARCH_SESSION_KEY, get_container

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.config.update(**config.SESSION_SETTINGS)

if config.PRODUCTION_MODE and config.SECRET_KEY_IS_DEFAULT:
    print("[ADVERTENCIA] POS_SECRET_KEY no está definida; se usa la clave de desarrollo.")

# ═══════════════════════════════════════════════════════════════════════════
# INICIALIZAR SISTEMA DE PROFILING
# ═══════════════════════════════════════════════════════════════════════════
# Mide rendimiento de rutas y llamadas al backend. Logs en /logs/
# Para desactivar: POS_ENABLE_PROFILING=0
init_profiling(app)


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def to_int(value, default=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if "token" not in session:
            return {"ok": False, "error": "Debes iniciar sesión."}, 401
        return f(*args, **kwargs)
    return wrapper


def json_body():
    return request.get_json(silent=True) or {}


def clear_session():
    """Vacía la sesión Flask y descarta su búsqueda en memoria."""
    search_id = session.get(SEARCH_SESSION_KEY)
    session.clear()
    if search_id:
        get_container().search_registry.discard(search_id)


def result_response(result):
    """Convierte el resultado {'ok': ...} de un servicio en respuesta HTTP."""
    return result, (200 if result.get("ok") else 400)


def type_options(role):
    return [
        {
            "value": ttype.value,
            "label": TRANSACTION_TYPE_INFO[ttype]["label"],
            "description": TRANSACTION_TYPE_INFO[ttype]["description"],
        }
        for ttype in allowed_transaction_types(role)
    ]


@app.errorhandler(AuthenticationExpiredError)
def handle_expired_session(error):
    """401 del backend: la sesión local ya no sirve."""
    clear_session()
    return {"ok": False, "error": str(error)}, 401


# ═══════════════════════════════════════════════════════════════════════════
# AUTENTICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    if not username or not password:
        return {"ok": False, "error": "Usuario y contraseña requeridos."}, 400

    container = get_container()
    try:
        result = container.auth_repo.login(username, password)
    except ApiError as e:
        log_error("Iniciar sesión", e, {"Usuario": username})
        return {"ok": False, "error": "Usuario o contraseña incorrecta."}, 401

    user = result.get("user") or {}
    token = result["token"]

    clear_session()
    session.permanent = True
    session["token"] = token
    session["user"] = user.get("username") or username
    session["user_id"] = user.get("id")
    session["role"] = user.get("role") or decode_token_role(token)

    container.cart_service.clear()
    return {
        "ok": True,
        "mensaje": f"Bienvenido, {session['user']}.",
        "user": {
            "id": session["user_id"],
            "username": session["user"],
            "role": session["role"],
        },
    }


@app.route("/logout", methods=["POST"])
@login_required
def logout():
    clear_session()
    return {"ok": True, "mensaje": "Sesión cerrada."}


# ═══════════════════════════════════════════════════════════════════════════
# API: BORRADOR (session-based)
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/borrador", methods=["GET"])
@login_required
def api_borrador_ver():
    """Ver el borrador actual con totales y tipos permitidos"""
    return {
        "ok": True,
        "borrador": get_container().cart_service.get_cart(),
        "tipos": type_options(session.get("role")),
    }


@app.route("/api/borrador/tipo", methods=["POST"])
@login_required
def api_borrador_tipo():
    data = json_body()
    result = get_container().cart_service.set_transaction_type(
        data.get("transactionType"),
        role=session.get("role")
    )
    return result_response(result)


@app.route("/api/borrador/punto-venta", methods=["POST"])
@login_required
def api_borrador_punto_venta():
    data = json_body()
    result = get_container().cart_service.set_point_of_sale(data.get("pointOfSaleId"))
    return result_response(result)


@app.route("/api/borrador/campos", methods=["POST"])
@login_required
def api_borrador_campos():
    """
    Cambia uno o varios campos simples.
    Espera JSON con cualquiera de: remarks, paymentMethod,
    destinationPointOfSaleId, discount
    """
    data = json_body()
    if not data:
        return {"ok": False, "error": "Datos no recibidos o formato inválido"}, 400

    cart_service = get_container().cart_service
    result = None
    for name, value in data.items():
        if name in ("transactionType", "pointOfSaleId"):
            return {"ok": False, "error": f"Use la ruta dedicada para '{name}'"}, 400
        result = cart_service.set_field(name, value)
        if not result.get("ok"):
            break
    return result_response(result)


@app.route("/api/borrador/items", methods=["POST"])
@login_required
def api_borrador_agregar():
    """
    Agrega un candidato de búsqueda al borrador.
    Espera JSON con: candidate (resultado de /api/buscar), quantity (opcional)
    """
    data = json_body()
    candidate_data = data.get("candidate")
    if not isinstance(candidate_data, dict) or not candidate_data.get("id"):
        return {"ok": False, "error": "Producto inválido"}, 400

    container = get_container()
    candidate = container.current_search_service().select(CandidateItem.from_dict(candidate_data))
    result = container.cart_service.add_item(candidate, data.get("quantity"))
    return result_response(result)


@app.route("/api/borrador/items/cantidad", methods=["POST"])
@login_required
def api_borrador_cantidad():
    data = json_body()
    key = data.get("key")
    if not key:
        return {"ok": False, "error": "Producto no indicado"}, 400
    result = get_container().cart_service.update_quantity(key, data.get("quantity"))
    return result_response(result)


@app.route("/api/borrador/items/eliminar", methods=["POST"])
@login_required
def api_borrador_eliminar():
    data = json_body()
    key = data.get("key")
    if not key:
        return {"ok": False, "error": "Producto no indicado"}, 400
    return result_response(get_container().cart_service.remove_item(key))


@app.route("/api/borrador/cancelar", methods=["POST"])
@login_required
def api_borrador_cancelar():
    """Descartar el borrador"""
    return result_response(get_container().cart_service.clear())


@app.route("/api/borrador/confirmar", methods=["POST"])
@login_required
def api_borrador_confirmar():
    """
    Valida y envía el borrador al backend.
    El borrador solo se descarta si el envío fue exitoso.
    """
    container = get_container()
    draft = container.cart_service.get_draft()

    try:
        response = container.transaction_service.submit(draft)
    except DraftValidationError as e:
        return {"ok": False, "error": str(e), "errors": e.errors}, 400
    except SubmissionInProgressError:
        return {"ok": False, "error": "Ya hay un envío en curso."}, 409
    except SubmissionError as e:
        return {"ok": False, "error": str(e)}, 502

    container.cart_service.clear()
    return {
        "ok": True,
        "mensaje": "Transacción creada exitosamente",
        "respuesta": response,
    }


# ═══════════════════════════════════════════════════════════════════════════
# API: BÚSQUEDA Y REFERENCIAS
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/buscar", methods=["GET"])
@login_required
def api_buscar():
    """
    Busca candidatos para el borrador actual.
    El cliente envía `seq` creciente y descarta respuestas con seq viejo.
    """
    query = request.args.get("q", "")
    container = get_container()
    draft = container.cart_service.get_draft()

    outcome = container.current_search_service().run_query(
        draft.point_of_sale_id,
        draft.transaction_type,
        query
    )
    return {
        "ok": True,
        "seq": to_int(request.args.get("seq"), outcome["seq"]),
        "stale": outcome["stale"],
        "resultados": [c.to_dict() for c in outcome["results"]],
    }


@app.route("/api/puntos-venta", methods=["GET"])
@login_required
def api_puntos_venta():
    try:
        points = get_container().transaction_service.list_points_of_sale()
    except AuthenticationExpiredError:
        raise
    except ApiError as e:
        log_error("Cargar puntos de venta", e)
        return {"ok": False, "error": "No se pudieron cargar los puntos de venta."}, 502
    return {"ok": True, "puntos_venta": points}


@app.route("/api/transacciones", methods=["GET"])
@login_required
def api_transacciones():
    """
    Historial enriquecido.

    Query params:
        periodo: today / week / month / custom (opcional)
        inicio, fin: YYYY-MM-DD (solo custom)
        usuario: ID de usuario (opcional)
        q: texto libre; tipo: all / sale / restock / adjustment / transfer
    """
    start_date, end_date = resolve_date_range(
        request.args.get("periodo"),
        request.args.get("inicio"),
        request.args.get("fin"),
    )
    user_id = to_int(request.args.get("usuario"))

    container = get_container()
    enrichment = container.enrichment_service
    try:
        views = container.transaction_service.list_transactions(user_id, start_date, end_date)
    except AuthenticationExpiredError:
        raise
    except ApiError as e:
        log_error("Cargar transacciones", e)
        return {"ok": False, "error": "No se pudieron cargar las transacciones."}, 502

    views = enrichment.filter_views(
        views,
        request.args.get("q", ""),
        request.args.get("tipo", "all"),
    )
    return {
        "ok": True,
        "transacciones": views,
        "resumen": enrichment.summarize(views),
        "rango": {"startDate": start_date, "endDate": end_date},
    }


if __name__ == "__main__":
    # Configuración para desarrollo local
    # En producción usar WSGI (gunicorn wsgi:app)
    if not config.DEBUG:
        print(f"\n{'='*50}")
        print(f"  Consola iniciada en http://{config.HOST}:{config.PORT}")
        print(f"  Backend REST: {config.API_BASE_URL}")
        print(f"{'='*50}\n")

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
