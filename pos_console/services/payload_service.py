# ==============================================================================
# SERVICIO DE ARMADO DEL PAYLOAD DE ENVÍO
# ==============================================================================
# Convierte un borrador validado en el cuerpo de POST /inventory-transaction/bulk.
#
# El backend decide la operación según QUÉ campos vienen en cada ítem, así que
# los conjuntos de campos por tipo deben respetarse exactamente:
#
#   reabastecimiento, producto nuevo   → {productId, pointOfSaleId, quantity}
#   reabastecimiento, inventario       → {inventoryId, quantity}
#   venta / ajuste / transferencia     → {inventoryId, quantity}
# ==============================================================================

from typing import Any, Dict, List

from pos_console.models import CartItem, PaymentMethod, TransactionDraft, TransactionType


# Vocabulario de métodos de pago: consola → backend
BACKEND_PAYMENT_METHODS = {
    PaymentMethod.CASH: 'cash',
    PaymentMethod.CARD: 'card',
    PaymentMethod.QR: 'transfer',
}


class PayloadService:
    """
    Servicio que arma el cuerpo del envío en bloque.
    No valida: se espera un borrador que ya pasó ValidationService.
    """

    def shape_item(self, draft: TransactionDraft, item: CartItem) -> Dict[str, Any]:
        if draft.transaction_type == TransactionType.RESTOCK:
            if item.product_id and item.inventory_id == 0:
                return {
                    'productId': item.product_id,
                    'pointOfSaleId': draft.point_of_sale_id,
                    'quantity': item.quantity,
                }
        return {
            'inventoryId': item.inventory_id,
            'quantity': item.quantity,
        }

    def shape_items(self, draft: TransactionDraft) -> List[Dict[str, Any]]:
        return [self.shape_item(draft, item) for item in draft.items]

    def build(self, draft: TransactionDraft) -> Dict[str, Any]:
        """
        Arma el payload completo.

        Returns:
            Diccionario listo para serializar como JSON
        """
        ttype = draft.transaction_type
        payload: Dict[str, Any] = {
            'transactionType': ttype.value if ttype else None,
            'remarks': draft.remarks,
            'items': self.shape_items(draft),
        }

        if ttype == TransactionType.SALE:
            payload['discount'] = float(draft.discount or 0)
            if draft.payment_method:
                payload['paymentMethod'] = BACKEND_PAYMENT_METHODS[draft.payment_method]

        if ttype == TransactionType.TRANSFER:
            payload['sourcePointOfSaleId'] = draft.point_of_sale_id
            payload['destinationPointOfSaleId'] = draft.destination_point_of_sale_id

        return payload
