# ==============================================================================
# SERVICIO DE ENRIQUECIMIENTO DE TRANSACCIONES
# ==============================================================================
# El backend devuelve transacciones normalizadas (solo IDs). Este servicio las
# cruza con las colecciones de referencia (productos, puntos de venta,
# usuarios, inventarios) para obtener vistas listas para mostrar.
#
# REGLAS:
# - Es una función pura: no llama a la red ni modifica sus entradas
# - Se recalcula completo en cada carga del listado
# - Una referencia que no se resuelve produce una etiqueta de reemplazo
#   ("Punto de Venta 7"), nunca una excepción
# - totalValue solo existe en transacciones agrupadas de VENTA
# ==============================================================================

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from pos_console.models import ReferenceSnapshot, TransactionType, transaction_type_label


def point_of_sale_placeholder(pos_id: Any) -> str:
    return f'Punto de Venta {pos_id}'


def product_placeholder(product_id: Any) -> str:
    return f'Producto {product_id}'


def user_placeholder(user_id: Any) -> str:
    return f'Usuario {user_id}'


SKU_PLACEHOLDER = 'N/A'


def _index_by_id(rows: Optional[Iterable[Dict[str, Any]]]) -> Dict[Any, Dict[str, Any]]:
    """Índice {id: fila}. Acepta IDs numéricos o en texto."""
    index = {}
    for row in rows or []:
        if not isinstance(row, dict) or row.get('id') is None:
            continue
        index[row['id']] = row
        index[str(row['id'])] = row
    return index


def _price(product: Optional[Dict[str, Any]]) -> float:
    if not product:
        return 0.0
    try:
        return float(product.get('price') or 0)
    except (TypeError, ValueError):
        return 0.0


def _quantity(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class ReferenceIndex:
    """
    Índices de búsqueda sobre una instantánea de referencias.
    Se construye una vez por carga del listado.
    """

    def __init__(self, snapshot: ReferenceSnapshot):
        self.products = _index_by_id(snapshot.products)
        self.points_of_sale = _index_by_id(snapshot.points_of_sale)
        self.users = _index_by_id(snapshot.users)
        self.inventories = _index_by_id(snapshot.inventories)

    def point_of_sale_name(self, pos_id: Any) -> Optional[str]:
        if pos_id is None:
            return None
        pos = self.points_of_sale.get(pos_id)
        if pos and pos.get('name'):
            return pos['name']
        return point_of_sale_placeholder(pos_id)

    def user_name(self, user_id: Any) -> Optional[str]:
        if user_id is None:
            return None
        user = self.users.get(user_id)
        if user:
            name = user.get('name') or user.get('username')
            if name:
                return name
        return user_placeholder(user_id)

    def inventory(self, inventory_id: Any, embedded: Any = None) -> Optional[Dict[str, Any]]:
        if isinstance(embedded, dict) and embedded:
            return embedded
        if inventory_id is None:
            return None
        return self.inventories.get(inventory_id)

    def product(self, product_id: Any, embedded: Any = None) -> Optional[Dict[str, Any]]:
        if product_id is not None and product_id in self.products:
            return self.products[product_id]
        if isinstance(embedded, dict) and embedded:
            return embedded
        return None


class EnrichmentService:
    """
    Servicio para enriquecer transacciones con nombres legibles.

    Responsabilidades:
    - Resolver nombres de punto de venta, usuario y producto
    - Expandir transacciones agrupadas con subtotales por ítem
    - Filtrar y resumir las vistas para el listado
    """

    def enrich(
        self,
        records: Iterable[Dict[str, Any]],
        snapshot: ReferenceSnapshot
    ) -> List[Dict[str, Any]]:
        """
        Enriquece todas las transacciones.

        Args:
            records: Transacciones normalizadas del backend
            snapshot: Colecciones de referencia (alguna puede faltar)

        Returns:
            Lista de vistas enriquecidas, en el mismo orden
        """
        index = ReferenceIndex(snapshot)
        return [self.enrich_record(record, index) for record in records or []]

    def enrich_record(self, record: Dict[str, Any], index: ReferenceIndex) -> Dict[str, Any]:
        view = dict(record)

        view['remarks'] = record.get('remarks') or ''
        if record.get('date'):
            view['date'] = record['date']
        elif record.get('createdAt'):
            view['date'] = record['createdAt']

        view['sourcePointOfSaleName'] = index.point_of_sale_name(record.get('sourcePointOfSaleId'))
        view['destinationPointOfSaleName'] = index.point_of_sale_name(record.get('destinationPointOfSaleId'))
        view['userName'] = index.user_name(record.get('userId'))
        view['transactionTypeLabel'] = transaction_type_label(record.get('transactionType'))

        if record.get('isGrouped'):
            self._enrich_grouped(view, record, index)
        else:
            self._enrich_single(view, record, index)

        return view

    def _resolve_line(
        self,
        inventory_id: Any,
        embedded_inventory: Any,
        index: ReferenceIndex,
        product_id: Any = None,
        pos_id: Any = None
    ) -> Dict[str, Any]:
        """
        Resuelve inventario → producto → punto de venta para un ítem.
        """
        inventory = index.inventory(inventory_id, embedded_inventory) or {}
        pid = inventory.get('productId', product_id)
        product = index.product(pid, inventory.get('product'))
        if pid is None and product:
            pid = product.get('id')

        if product and product.get('name'):
            name = product['name']
        elif pid is not None:
            name = product_placeholder(pid)
        else:
            name = product_placeholder(inventory_id)

        pos_id = inventory.get('pointOfSaleId', pos_id)
        return {
            'inventoryId': inventory_id,
            'productId': pid,
            'productName': name,
            'productSku': (product or {}).get('sku') or SKU_PLACEHOLDER,
            'pointOfSaleId': pos_id,
            'pointOfSaleName': index.point_of_sale_name(pos_id),
            'unitPrice': _price(product),
        }

    def _enrich_grouped(self, view: Dict[str, Any], record: Dict[str, Any], index: ReferenceIndex) -> None:
        is_sale = TransactionType.parse(record.get('transactionType')) == TransactionType.SALE

        enriched_items = []
        total_quantity = 0
        total_value = 0.0

        for item in record.get('items') or []:
            quantity = _quantity(item.get('quantity'))
            line = self._resolve_line(
                item.get('inventoryId'),
                item.get('inventory'),
                index,
                pos_id=record.get('pointOfSaleId')
            )
            line['quantity'] = quantity
            line['subtotal'] = round(line['unitPrice'] * quantity, 2)
            enriched_items.append(line)

            total_quantity += quantity
            if is_sale:
                total_value += line['subtotal']

        view['enrichedItems'] = enriched_items
        view['totalQuantity'] = total_quantity
        if is_sale:
            view['totalValue'] = round(total_value, 2)
        else:
            view.pop('totalValue', None)

        view['productName'] = ', '.join(line['productName'] for line in enriched_items)
        view['productSku'] = ', '.join(line['productSku'] for line in enriched_items)

        pos_id = record.get('pointOfSaleId')
        if pos_id is None and enriched_items:
            pos_id = enriched_items[0]['pointOfSaleId']
        view['pointOfSaleName'] = index.point_of_sale_name(pos_id)

    def _enrich_single(self, view: Dict[str, Any], record: Dict[str, Any], index: ReferenceIndex) -> None:
        line = self._resolve_line(
            record.get('inventoryId'),
            record.get('inventory'),
            index,
            product_id=record.get('productId'),
            pos_id=record.get('pointOfSaleId', record.get('sourcePointOfSaleId'))
        )
        view['productName'] = line['productName']
        view['productSku'] = line['productSku']
        view['pointOfSaleName'] = line['pointOfSaleName']

    # =========================================================================
    # FILTROS Y RESUMEN DEL LISTADO
    # =========================================================================

    def filter_views(
        self,
        views: Iterable[Dict[str, Any]],
        query: str = '',
        type_filter: str = 'all'
    ) -> List[Dict[str, Any]]:
        """
        Filtra por texto (comentarios, producto o punto de venta) y tipo.

        Args:
            query: Texto libre (sin distinguir mayúsculas)
            type_filter: 'all' o un tipo de transacción
        """
        needle = (query or '').strip().lower()
        wanted = None if not type_filter or type_filter == 'all' else TransactionType.parse(type_filter)

        result = []
        for view in views:
            if wanted is not None and TransactionType.parse(view.get('transactionType')) != wanted:
                continue
            if needle and not self._matches(view, needle):
                continue
            result.append(view)
        return result

    @staticmethod
    def _matches(view: Dict[str, Any], needle: str) -> bool:
        haystack = [
            view.get('remarks'),
            view.get('productName'),
            view.get('pointOfSaleName'),
        ]
        for line in view.get('enrichedItems') or []:
            haystack.append(line.get('productName'))
            haystack.append(line.get('pointOfSaleName'))
        return any(needle in (text or '').lower() for text in haystack)

    def summarize(self, views: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Resumen del listado.

        Returns:
            Dict con total de transacciones, cantidades, ventas y conteo por tipo
        """
        views = list(views)
        by_type = defaultdict(int)
        total_quantity = 0
        total_sales = 0.0
        valued_sales = 0

        for view in views:
            ttype = TransactionType.parse(view.get('transactionType'))
            by_type[ttype.value if ttype else 'otro'] += 1

            if 'totalQuantity' in view:
                total_quantity += _quantity(view['totalQuantity'])
            else:
                total_quantity += _quantity(view.get('quantity'))

            if ttype == TransactionType.SALE and 'totalValue' in view:
                total_sales += view['totalValue']
                valued_sales += 1

        return {
            'totalTransactions': len(views),
            'totalQuantity': total_quantity,
            'totalSales': round(total_sales, 2),
            'averageTransactionValue': round(total_sales / valued_sales, 2) if valued_sales else 0.0,
            'transactionsByType': dict(by_type),
        }
