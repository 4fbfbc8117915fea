# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso al backend REST
# ==============================================================================
# Los repositorios encapsulan las rutas HTTP del backend.
# Los servicios NO conocen httpx: dependen de las interfaces.
#
# ESTRUCTURA:
# ├── interfaces.py              → Protocolos (contratos)
# ├── base.py                    → Cliente httpx, token y errores HTTP
# ├── catalog_repository.py      → Búsquedas y colecciones de referencia
# ├── transaction_repository.py  → Historial y envío en bloque
# └── auth_repository.py         → Login y lectura del rol del JWT
# ==============================================================================

from pos_console.repositories.base import ApiRepository, create_http_client
from pos_console.repositories.catalog_repository import CatalogRepository, as_list
from pos_console.repositories.transaction_repository import TransactionRepository
from pos_console.repositories.auth_repository import AuthRepository, decode_token_role
from pos_console.repositories.interfaces import (
    ICatalogRepository,
    ITransactionRepository,
)

__all__ = [
    'ApiRepository',
    'create_http_client',
    'CatalogRepository',
    'TransactionRepository',
    'AuthRepository',
    'as_list',
    'decode_token_role',
    'ICatalogRepository',
    'ITransactionRepository',
]
