# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos de la consola
# ==============================================================================
# Entidades del dominio definidas con dataclasses:
#   - Candidatos de búsqueda y líneas del borrador
#   - Borrador de transacción (con sus reinicios dependientes)
#   - Resultado de validación
#   - Instantánea de colecciones de referencia
# ==============================================================================

from .entities import (
    # Tipos
    TransactionType,
    PaymentMethod,
    UserRole,
    TRANSACTION_TYPE_INFO,
    transaction_type_label,
    allowed_transaction_types,

    # Búsqueda
    CandidateItem,

    # Borrador
    CartItem,
    TransactionDraft,
    ValidationResult,
    item_key,

    # Lectura
    ReferenceSnapshot,
)

__all__ = [
    'TransactionType',
    'PaymentMethod',
    'UserRole',
    'TRANSACTION_TYPE_INFO',
    'transaction_type_label',
    'allowed_transaction_types',
    'CandidateItem',
    'CartItem',
    'TransactionDraft',
    'ValidationResult',
    'item_key',
    'ReferenceSnapshot',
]
