# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Los nombres de campo en to_dict()/from_dict() usan camelCase porque son los
# mismos que viajan en el JSON del backend y en la sesión de Flask.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum


# ==============================================================================
# ENUMERACIONES - Tipos válidos
# ==============================================================================

class TransactionType(str, Enum):
    """Tipos de transacción de inventario."""
    SALE = "sale"              # Venta: reduce inventario
    RESTOCK = "restock"        # Reabastecimiento: aumenta inventario
    ADJUSTMENT = "adjustment"  # Ajuste: corrección (+/-)
    TRANSFER = "transfer"      # Transferencia entre puntos de venta

    @classmethod
    def parse(cls, value: Any) -> Optional['TransactionType']:
        """Convierte un string a TransactionType; None si no es válido."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class PaymentMethod(str, Enum):
    """Métodos de pago tal como los muestra la consola."""
    CASH = "cash"
    CARD = "card"
    QR = "qr"

    @classmethod
    def parse(cls, value: Any) -> Optional['PaymentMethod']:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class UserRole(str, Enum):
    """Roles que devuelve el backend en el JWT."""
    ADMIN = "admin"
    USER = "user"


TRANSACTION_TYPE_INFO = {
    TransactionType.SALE: {
        'label': 'Venta',
        'description': 'Reduce el inventario por venta de productos',
    },
    TransactionType.RESTOCK: {
        'label': 'Reabastecimiento',
        'description': 'Aumenta el inventario por compra o reposición',
    },
    TransactionType.ADJUSTMENT: {
        'label': 'Ajuste',
        'description': 'Corrección de inventario (productos dañados, pérdidas, etc.)',
    },
    TransactionType.TRANSFER: {
        'label': 'Transferencia',
        'description': 'Movimiento de productos entre puntos de venta',
    },
}


def transaction_type_label(value: Any) -> str:
    """Etiqueta en español de un tipo de transacción."""
    ttype = TransactionType.parse(value)
    if ttype is None:
        return 'Transacción'
    return TRANSACTION_TYPE_INFO[ttype]['label']


def allowed_transaction_types(role: Optional[str]) -> List[TransactionType]:
    """
    Tipos que puede crear un rol.
    Admin crea todos; un usuario normal solo ventas y ajustes.
    """
    if role == UserRole.ADMIN.value:
        return list(TransactionType)
    return [TransactionType.SALE, TransactionType.ADJUSTMENT]


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ==============================================================================
# CANDIDATOS DE BÚSQUEDA
# ==============================================================================

@dataclass
class CandidateItem:
    """
    Resultado de búsqueda que puede agregarse al borrador.

    Para reabastecimiento viene del catálogo de productos (id == product_id,
    sin registro de inventario). Para el resto viene de la búsqueda de
    inventario de un punto de venta (id es el ID del inventario).

    Attributes:
        id: ID del inventario (o del producto en el catálogo)
        product_id: ID del producto
        product_name: Nombre del producto
        product_sku: SKU
        barcode: Código de barras (opcional)
        stock_quantity: Stock actual en el punto de venta
        minimum_stock: Stock mínimo antes de alerta
        on_display: Si está en exhibición
        price: Precio de venta (puede faltar en el catálogo)
        from_catalog: True si proviene de /product/search
    """
    id: int
    product_id: int
    product_name: str
    product_sku: str
    barcode: Optional[str] = None
    stock_quantity: int = 0
    minimum_stock: int = 0
    on_display: bool = False
    price: Optional[float] = None
    from_catalog: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'productId': self.product_id,
            'productName': self.product_name,
            'productSku': self.product_sku,
            'barcode': self.barcode,
            'stockQuantity': self.stock_quantity,
            'minimumStock': self.minimum_stock,
            'onDisplay': self.on_display,
            'price': self.price,
            'fromCatalog': self.from_catalog,
        }

    @classmethod
    def from_product(cls, data: Dict[str, Any]) -> 'CandidateItem':
        """Crea un candidato desde un producto del catálogo (reabastecimiento)."""
        pid = _to_int(data.get('id'))
        return cls(
            id=pid,
            product_id=pid,
            product_name=data.get('name', '') or '',
            product_sku=data.get('sku', '') or '',
            barcode=data.get('barcode'),
            price=_to_float(data.get('price')),
            from_catalog=True
        )

    @classmethod
    def from_inventory(cls, data: Dict[str, Any]) -> 'CandidateItem':
        """
        Crea un candidato desde la búsqueda de inventario.
        Acepta el producto anidado (`product`) o los campos planos
        (`productName`, `productSku`).
        """
        product = data.get('product') or {}
        price = data.get('price')
        if price is None:
            price = product.get('price')
        return cls(
            id=_to_int(data.get('id')),
            product_id=_to_int(data.get('productId', product.get('id'))),
            product_name=data.get('productName') or product.get('name', '') or '',
            product_sku=data.get('productSku') or product.get('sku', '') or '',
            barcode=data.get('barcode', product.get('barcode')),
            stock_quantity=_to_int(data.get('stockQuantity')),
            minimum_stock=_to_int(data.get('minimumStock')),
            on_display=bool(data.get('onDisplay', False)),
            price=_to_float(price)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CandidateItem':
        """Crea instancia desde el formato de to_dict()."""
        return cls(
            id=_to_int(data.get('id')),
            product_id=_to_int(data.get('productId')),
            product_name=data.get('productName', '') or '',
            product_sku=data.get('productSku', '') or '',
            barcode=data.get('barcode'),
            stock_quantity=_to_int(data.get('stockQuantity')),
            minimum_stock=_to_int(data.get('minimumStock')),
            on_display=bool(data.get('onDisplay', False)),
            price=_to_float(data.get('price')),
            from_catalog=bool(data.get('fromCatalog', False))
        )


# ==============================================================================
# ENTIDADES DEL BORRADOR
# ==============================================================================

@dataclass
class CartItem:
    """
    Línea del borrador de transacción.

    Attributes:
        inventory_id: ID del inventario (0 si el producto aún no tiene inventario)
        product_id: ID del producto (reabastecimiento de producto nuevo)
        quantity: Cantidad (puede ser 0 o negativa solo en ajustes)
        product_name: Nombre del producto
        product_sku: SKU
        barcode: Código de barras
        stock_quantity: Stock al momento de agregarlo
        price: Precio unitario (puede faltar)
    """
    inventory_id: int
    quantity: int
    product_name: str
    product_sku: str
    product_id: Optional[int] = None
    barcode: Optional[str] = None
    stock_quantity: int = 0
    price: Optional[float] = None

    @property
    def key(self) -> str:
        """Clave de identidad usada para fusionar y ubicar líneas."""
        return item_key(self.inventory_id, self.product_id)

    @property
    def subtotal(self) -> float:
        """Subtotal de esta línea (precio ausente cuenta como 0)."""
        return (self.price or 0) * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para la sesión."""
        return {
            'key': self.key,
            'inventoryId': self.inventory_id,
            'productId': self.product_id,
            'quantity': self.quantity,
            'productName': self.product_name,
            'productSku': self.product_sku,
            'barcode': self.barcode,
            'stockQuantity': self.stock_quantity,
            'price': self.price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        """Crea instancia desde diccionario de sesión."""
        product_id = data.get('productId')
        return cls(
            inventory_id=_to_int(data.get('inventoryId')),
            product_id=_to_int(product_id) if product_id is not None else None,
            quantity=_to_int(data.get('quantity')),
            product_name=data.get('productName', '') or '',
            product_sku=data.get('productSku', '') or '',
            barcode=data.get('barcode'),
            stock_quantity=_to_int(data.get('stockQuantity')),
            price=_to_float(data.get('price'))
        )


def item_key(inventory_id: int, product_id: Optional[int] = None) -> str:
    """
    Clave de identidad de una línea.

    Reabastecimiento sin inventario previo (inventory_id == 0) se identifica
    por producto; todo lo demás por inventario.
    """
    if not inventory_id and product_id:
        return f'product:{product_id}'
    return f'inventory:{inventory_id}'


@dataclass
class TransactionDraft:
    """
    Transacción en construcción (nunca se persiste en el backend hasta enviarla).

    Attributes:
        point_of_sale_id: Punto de venta (origen en transferencias); 0 = sin elegir
        transaction_type: Tipo de transacción
        payment_method: Método de pago (solo ventas)
        remarks: Comentarios obligatorios
        destination_point_of_sale_id: Destino (solo transferencias)
        discount: Descuento en monto (solo ventas)
        items: Líneas del borrador
    """
    point_of_sale_id: int = 0
    transaction_type: Optional[TransactionType] = TransactionType.SALE
    payment_method: Optional[PaymentMethod] = None
    remarks: str = ''
    destination_point_of_sale_id: Optional[int] = None
    discount: float = 0.0
    items: List[CartItem] = field(default_factory=list)

    # Campos que acepta apply()
    FIELDS = (
        'transactionType',
        'pointOfSaleId',
        'destinationPointOfSaleId',
        'paymentMethod',
        'remarks',
        'discount',
    )

    def find_item(self, key: str) -> Optional[CartItem]:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def apply(self, field_name: str, value: Any) -> None:
        """
        Cambia un campo del borrador aplicando los reinicios dependientes.

        - transactionType: limpia punto de venta, destino, método de pago,
          descuento e ítems (el borrador no es portable entre tipos).
        - pointOfSaleId: limpia los ítems.
        """
        if field_name == 'transactionType':
            new_type = TransactionType.parse(value) if value else None
            if new_type == self.transaction_type:
                return
            self.transaction_type = new_type
            self.point_of_sale_id = 0
            self.destination_point_of_sale_id = None
            self.payment_method = None
            self.discount = 0.0
            self.items = []
        elif field_name == 'pointOfSaleId':
            new_pos = _to_int(value)
            if new_pos == self.point_of_sale_id:
                return
            self.point_of_sale_id = new_pos
            self.items = []
        elif field_name == 'destinationPointOfSaleId':
            dest = _to_int(value)
            self.destination_point_of_sale_id = dest or None
        elif field_name == 'paymentMethod':
            self.payment_method = PaymentMethod.parse(value) if value else None
        elif field_name == 'remarks':
            self.remarks = '' if value is None else str(value)
        elif field_name == 'discount':
            amount = _to_float(value)
            self.discount = amount if amount is not None else 0.0
        else:
            raise KeyError(field_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para la sesión."""
        return {
            'pointOfSaleId': self.point_of_sale_id,
            'transactionType': self.transaction_type.value if self.transaction_type else None,
            'paymentMethod': self.payment_method.value if self.payment_method else None,
            'remarks': self.remarks,
            'destinationPointOfSaleId': self.destination_point_of_sale_id,
            'discount': self.discount,
            'items': [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionDraft':
        """Crea instancia desde diccionario de sesión."""
        dest = data.get('destinationPointOfSaleId')
        ttype = data.get('transactionType', TransactionType.SALE.value)
        return cls(
            point_of_sale_id=_to_int(data.get('pointOfSaleId')),
            transaction_type=TransactionType.parse(ttype) if ttype else None,
            payment_method=PaymentMethod.parse(data['paymentMethod']) if data.get('paymentMethod') else None,
            remarks=data.get('remarks', '') or '',
            destination_point_of_sale_id=_to_int(dest) or None,
            discount=_to_float(data.get('discount')) or 0.0,
            items=[CartItem.from_dict(i) for i in data.get('items', [])]
        )


@dataclass
class ValidationResult:
    """Resultado de validar un borrador: errores por campo."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


# ==============================================================================
# DATOS DE REFERENCIA (lado lectura)
# ==============================================================================

@dataclass
class ReferenceSnapshot:
    """
    Colecciones de referencia para enriquecer transacciones.
    Una colección en None significa que su carga falló; el enriquecimiento
    usa etiquetas de reemplazo para lo que no pueda resolver.
    """
    products: Optional[List[Dict[str, Any]]] = None
    points_of_sale: Optional[List[Dict[str, Any]]] = None
    users: Optional[List[Dict[str, Any]]] = None
    inventories: Optional[List[Dict[str, Any]]] = None

    @property
    def missing(self) -> List[str]:
        """Nombres de las colecciones que no se pudieron cargar."""
        names = []
        for name in ('products', 'points_of_sale', 'users', 'inventories'):
            if getattr(self, name) is None:
                names.append(name)
        return names
