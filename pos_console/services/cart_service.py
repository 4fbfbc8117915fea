# ==============================================================================
# SERVICIO DE BORRADOR (CARRITO DE TRANSACCIÓN)
# ==============================================================================
# Centraliza toda la lógica de negocio del borrador de transacción.
# El borrador se almacena en la sesión de Flask (session['borrador']) como
# un diccionario serializable; se descarta al enviar o cancelar.
# ==============================================================================

import math
from typing import Any, Callable, Dict, MutableMapping, Optional

from flask import session

from pos_console.models import (
    CandidateItem,
    CartItem,
    TransactionDraft,
    TransactionType,
    allowed_transaction_types,
    item_key,
)
from pos_console.services.pricing_service import PricingService


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _is_amount(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


class CartService:
    """
    Servicio para gestión del borrador de transacción.

    Responsabilidades:
    - Agregar ítems fusionando duplicados por clave de identidad
    - Aplicar la política de cantidades según el tipo
    - Cambiar tipo / punto de venta / campos con sus reinicios
    - Descartar el borrador

    No hace llamadas de red.
    """

    SESSION_KEY = 'borrador'

    def __init__(
        self,
        pricing_service: PricingService,
        search_provider: Optional[Callable[[], Any]] = None,
        storage: Optional[MutableMapping] = None
    ):
        """
        Inicializa el servicio de borrador.

        Args:
            pricing_service: Servicio de precios (para los totales)
            search_provider: Devuelve la búsqueda de la sesión actual, que se
                invalida cuando cambia el alcance
            storage: Almacenamiento del borrador (por defecto la sesión de Flask)
        """
        self.pricing_service = pricing_service
        self.search_provider = search_provider
        self.storage = storage

    def _store(self) -> MutableMapping:
        return self.storage if self.storage is not None else session

    def get_draft(self) -> TransactionDraft:
        """
        Obtiene el borrador actual; crea uno vacío si no existe.

        Returns:
            TransactionDraft
        """
        data = self._store().get(self.SESSION_KEY)
        if not data:
            return TransactionDraft()
        return TransactionDraft.from_dict(data)

    def _save_draft(self, draft: TransactionDraft) -> None:
        store = self._store()
        store[self.SESSION_KEY] = draft.to_dict()
        if hasattr(store, 'modified'):
            store.modified = True

    def _snapshot(self, draft: TransactionDraft) -> Dict[str, Any]:
        data = draft.to_dict()
        data['totales'] = self.pricing_service.summarize(draft)
        return data

    def _ok(self, draft: TransactionDraft, mensaje: str) -> Dict[str, Any]:
        return {'ok': True, 'mensaje': mensaje, 'borrador': self._snapshot(draft)}

    def _reset_search(self, draft: TransactionDraft) -> None:
        if self.search_provider is not None:
            self.search_provider().set_scope(draft.point_of_sale_id, draft.transaction_type)

    def get_cart(self) -> Dict[str, Any]:
        """
        Obtiene el borrador con totales calculados.

        Returns:
            Dict con los campos del borrador y 'totales'
        """
        return self._snapshot(self.get_draft())

    # =========================================================================
    # ÍTEMS
    # =========================================================================

    def add_item(self, candidate: CandidateItem, quantity: Any = None) -> Dict[str, Any]:
        """
        Agrega un candidato al borrador.

        Si ya existe una línea con la misma clave, suma la cantidad.
        Cantidad por defecto: 1 (0 en ajustes).

        Args:
            candidate: Resultado de búsqueda seleccionado
            quantity: Cantidad a agregar (opcional)

        Returns:
            Dict con resultado (ok, error, borrador)
        """
        draft = self.get_draft()
        ttype = draft.transaction_type
        if ttype is None:
            return {'ok': False, 'error': 'Debe seleccionar un tipo de transacción.'}

        is_adjustment = ttype == TransactionType.ADJUSTMENT
        if quantity is None:
            qty = 0 if is_adjustment else 1
        else:
            qty = _to_int(quantity)
            if qty is None:
                return {'ok': False, 'error': 'Cantidad inválida'}
        if not is_adjustment and qty <= 0:
            return {'ok': False, 'error': 'La cantidad debe ser mayor a 0'}

        if ttype == TransactionType.RESTOCK and candidate.from_catalog:
            inventory_id = 0
        else:
            inventory_id = candidate.id

        key = item_key(inventory_id, candidate.product_id)
        existing = draft.find_item(key)

        if existing:
            existing.quantity += qty
            mensaje = 'Cantidad actualizada'
        else:
            draft.items.append(CartItem(
                inventory_id=inventory_id,
                product_id=candidate.product_id or None,
                quantity=qty,
                product_name=candidate.product_name,
                product_sku=candidate.product_sku,
                barcode=candidate.barcode,
                stock_quantity=candidate.stock_quantity,
                price=candidate.price
            ))
            mensaje = 'Producto agregado'

        self._save_draft(draft)
        return self._ok(draft, mensaje)

    def update_quantity(self, key: str, value: Any) -> Dict[str, Any]:
        """
        Cambia la cantidad de una línea.

        En ajustes el valor se guarda tal cual (incluye 0 y negativos).
        En los demás tipos, un valor <= 0 elimina la línea.
        """
        qty = _to_int(value)
        if qty is None:
            return {'ok': False, 'error': 'Cantidad inválida'}

        draft = self.get_draft()
        item = draft.find_item(key)
        if item is None:
            return {'ok': False, 'error': 'Producto no encontrado en el borrador'}

        if draft.transaction_type != TransactionType.ADJUSTMENT and qty <= 0:
            return self.remove_item(key)

        item.quantity = qty
        self._save_draft(draft)
        return self._ok(draft, 'Cantidad actualizada')

    def remove_item(self, key: str) -> Dict[str, Any]:
        """Elimina una línea del borrador (sin condiciones)."""
        draft = self.get_draft()
        draft.items = [item for item in draft.items if item.key != key]
        self._save_draft(draft)
        return self._ok(draft, 'Producto eliminado')

    # =========================================================================
    # CAMPOS DEL BORRADOR
    # =========================================================================

    def set_transaction_type(self, value: Any, role: Optional[str] = None) -> Dict[str, Any]:
        """
        Cambia el tipo de transacción.
        Limpia punto de venta, destino, método de pago, descuento e ítems.

        Args:
            value: Nuevo tipo
            role: Rol del usuario; si se indica, restringe los tipos permitidos
        """
        ttype = TransactionType.parse(value)
        if ttype is None:
            return {'ok': False, 'error': 'Tipo de transacción inválido'}
        if role is not None and ttype not in allowed_transaction_types(role):
            return {
                'ok': False,
                'error': 'Solo puedes crear transacciones de venta y ajuste.'
            }

        draft = self.get_draft()
        draft.apply('transactionType', ttype)
        self._reset_search(draft)
        self._save_draft(draft)
        return self._ok(draft, 'Tipo de transacción actualizado')

    def set_point_of_sale(self, point_of_sale_id: Any) -> Dict[str, Any]:
        """Cambia el punto de venta; limpia ítems y la búsqueda en curso."""
        pos_id = _to_int(point_of_sale_id)
        if pos_id is None or pos_id < 0:
            return {'ok': False, 'error': 'Punto de venta inválido'}

        draft = self.get_draft()
        draft.apply('pointOfSaleId', pos_id)
        self._reset_search(draft)
        self._save_draft(draft)
        return self._ok(draft, 'Punto de venta actualizado')

    def set_field(self, name: str, value: Any) -> Dict[str, Any]:
        """
        Cambia un campo simple: remarks, paymentMethod,
        destinationPointOfSaleId o discount.
        """
        if name == 'transactionType':
            return self.set_transaction_type(value)
        if name == 'pointOfSaleId':
            return self.set_point_of_sale(value)
        if name not in TransactionDraft.FIELDS:
            return {'ok': False, 'error': f"Campo '{name}' no reconocido"}
        if name == 'discount' and value not in (None, '') and not _is_amount(value):
            return {'ok': False, 'error': 'Descuento inválido'}

        draft = self.get_draft()
        draft.apply(name, value)
        self._save_draft(draft)
        return self._ok(draft, 'Borrador actualizado')

    def clear(self) -> Dict[str, Any]:
        """Descarta el borrador (cancelación o envío exitoso)."""
        self._store().pop(self.SESSION_KEY, None)
        draft = TransactionDraft()
        self._reset_search(draft)
        return self._ok(draft, 'Borrador descartado')
