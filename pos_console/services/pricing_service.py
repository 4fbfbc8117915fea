# ==============================================================================
# SERVICIO DE PRECIOS
# ==============================================================================
# Subtotal, descuento y total del borrador. Solo aplica a ventas.
# Es una función pura del borrador: se recalcula en cada lectura.
# ==============================================================================

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable

from pos_console.models import CartItem, TransactionDraft, TransactionType


def format_currency(value: Any) -> str:
    """
    Formatea un monto en pesos colombianos sin decimales (es-CO).

    >>> format_currency(1500)
    '$ 1.500'
    """
    amount = Decimal(str(value or 0)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    sign = '-' if amount < 0 else ''
    digits = f'{abs(int(amount)):,}'.replace(',', '.')
    return f'{sign}$ {digits}'


class PricingService:
    """
    Servicio de cálculo de precios del borrador.

    Responsabilidades:
    - Subtotal: Σ precio × cantidad (precio ausente cuenta como 0)
    - Total: subtotal - descuento, nunca negativo
    """

    @staticmethod
    def calculate_subtotal(items: Iterable[CartItem]) -> float:
        return round(sum(item.subtotal for item in items), 2)

    def subtotal(self, draft: TransactionDraft) -> float:
        if draft.transaction_type != TransactionType.SALE:
            return 0.0
        return self.calculate_subtotal(draft.items)

    def total(self, draft: TransactionDraft) -> float:
        if draft.transaction_type != TransactionType.SALE:
            return 0.0
        return round(max(0.0, self.subtotal(draft) - (draft.discount or 0)), 2)

    def summarize(self, draft: TransactionDraft) -> Dict[str, Any]:
        """
        Totales del borrador listos para mostrar.

        Returns:
            Dict con applies, subtotal, discount, total y sus versiones formateadas
        """
        applies = draft.transaction_type == TransactionType.SALE
        subtotal = self.subtotal(draft)
        discount = draft.discount if applies else 0.0
        total = self.total(draft)
        return {
            'applies': applies,
            'subtotal': subtotal,
            'discount': discount,
            'total': total,
            'subtotal_formatted': format_currency(subtotal),
            'discount_formatted': format_currency(discount),
            'total_formatted': format_currency(total),
            'total_quantity': sum(item.quantity for item in draft.items),
            'items_count': len(draft.items),
        }
