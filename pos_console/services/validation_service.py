# ==============================================================================
# SERVICIO DE VALIDACIÓN DEL BORRADOR
# ==============================================================================
# Valida el borrador completo antes de permitir el envío.
# Se acumulan TODOS los campos con error, no solo el primero.
# Nunca toca la red.
# ==============================================================================

from pos_console.models import (
    PaymentMethod,
    TransactionDraft,
    TransactionType,
    ValidationResult,
)
from pos_console.services.pricing_service import PricingService, format_currency


class ValidationService:
    """
    Reglas (en orden de prioridad):
    - pointOfSaleId obligatorio
    - transactionType obligatorio
    - remarks obligatorio (no vacío tras trim)
    - items: al menos una línea
    - venta: paymentMethod obligatorio; 0 <= discount <= subtotal
    - transferencia: destino obligatorio y distinto del origen

    Las cantidades de cada línea ya las controla CartService.
    """

    def __init__(self, pricing_service: PricingService):
        self.pricing_service = pricing_service

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        result = ValidationResult()
        errors = result.errors

        if not draft.point_of_sale_id:
            errors['pointOfSaleId'] = 'Debe seleccionar un punto de venta.'

        if not draft.transaction_type:
            errors['transactionType'] = 'Debe seleccionar un tipo de transacción.'

        if not (draft.remarks or '').strip():
            errors['remarks'] = 'Los comentarios son obligatorios.'

        if not draft.items:
            errors['items'] = 'Debe agregar al menos un producto.'

        if draft.transaction_type == TransactionType.SALE:
            if not isinstance(draft.payment_method, PaymentMethod):
                errors['paymentMethod'] = 'Debe seleccionar un método de pago.'

            discount = draft.discount or 0
            if discount < 0:
                errors['discount'] = 'El descuento no puede ser negativo.'
            elif draft.items:
                subtotal = self.pricing_service.subtotal(draft)
                if discount > subtotal:
                    errors['discount'] = (
                        f'El descuento no puede ser mayor al subtotal '
                        f'({format_currency(subtotal)}).'
                    )

        if draft.transaction_type == TransactionType.TRANSFER:
            if not draft.destination_point_of_sale_id:
                errors['destinationPointOfSaleId'] = 'Debe seleccionar el punto de venta destino.'
            elif draft.destination_point_of_sale_id == draft.point_of_sale_id:
                errors['destinationPointOfSaleId'] = 'El destino debe ser diferente al origen.'

        return result
