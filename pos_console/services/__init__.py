# ==============================================================================
# CAPA DE SERVICIOS - Lógica de la consola
# ==============================================================================
# Esta capa contiene TODA la lógica de composición y lectura de transacciones.
#
# PRINCIPIOS:
# 1. Las rutas (controllers) solo llaman a servicios
# 2. Los servicios dependen de INTERFACES de repositorios, no de httpx
# 3. Precios, validación, payload y enriquecimiento son funciones puras
#
# ESTRUCTURA:
# ├── search_service.py       → Typeahead con debounce y descarte de respuestas viejas
# ├── cart_service.py         → Borrador en sesión, fusión de líneas, reinicios
# ├── pricing_service.py      → Subtotal, descuento, total y formato COP
# ├── validation_service.py   → Errores por campo antes de enviar
# ├── payload_service.py      → Cuerpo de POST /inventory-transaction/bulk
# ├── enrichment_service.py   → Historial con nombres legibles
# └── transaction_service.py  → Envío protegido e historial enriquecido
# ==============================================================================

from pos_console.services.pricing_service import PricingService, format_currency
from pos_console.services.validation_service import ValidationService
from pos_console.services.payload_service import PayloadService, BACKEND_PAYMENT_METHODS
from pos_console.services.search_service import SearchRegistry, SearchService
from pos_console.services.cart_service import CartService
from pos_console.services.enrichment_service import EnrichmentService
from pos_console.services.transaction_service import TransactionService, resolve_date_range

__all__ = [
    'PricingService',
    'format_currency',
    'ValidationService',
    'PayloadService',
    'BACKEND_PAYMENT_METHODS',
    'SearchService',
    'SearchRegistry',
    'CartService',
    'EnrichmentService',
    'TransactionService',
    'resolve_date_range',
]
