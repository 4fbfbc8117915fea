from pos_console.models import ReferenceSnapshot
from pos_console.services import EnrichmentService


PRODUCTS = [
    {'id': 100, 'name': 'Coca Cola 400ml', 'sku': 'COC-400', 'price': 50},
    {'id': 101, 'name': 'Papas', 'sku': 'PAP-1', 'price': 150},
]
POINTS_OF_SALE = [{'id': 1, 'name': 'Centro'}, {'id': 2, 'name': 'Norte'}]
USERS = [{'id': 9, 'username': 'ana'}]
INVENTORIES = [
    {'id': 10, 'productId': 100, 'pointOfSaleId': 1},
    {'id': 11, 'productId': 101, 'pointOfSaleId': 1},
]


def full_snapshot():
    return ReferenceSnapshot(
        products=PRODUCTS,
        points_of_sale=POINTS_OF_SALE,
        users=USERS,
        inventories=INVENTORIES,
    )


def grouped(transaction_type):
    return {
        'id': 1,
        'isGrouped': True,
        'transactionType': transaction_type,
        'userId': 9,
        'createdAt': '2024-05-01T10:00:00Z',
        'items': [
            {'inventoryId': 10, 'quantity': 2},
            {'inventoryId': 11, 'quantity': 1},
        ],
    }


def test_unknown_point_of_sale_gets_placeholder():
    record = {'id': 5, 'transactionType': 'transfer', 'sourcePointOfSaleId': 1, 'destinationPointOfSaleId': 7}

    view = EnrichmentService().enrich([record], full_snapshot())[0]

    assert view['sourcePointOfSaleName'] == 'Centro'
    assert view['destinationPointOfSaleName'] == 'Punto de Venta 7'


def test_grouped_sale_aggregates_items():
    view = EnrichmentService().enrich([grouped('sale')], full_snapshot())[0]

    assert view['totalQuantity'] == 3
    assert view['totalValue'] == 250
    assert [i['subtotal'] for i in view['enrichedItems']] == [100, 150]
    assert view['enrichedItems'][0]['productName'] == 'Coca Cola 400ml'
    assert view['enrichedItems'][0]['pointOfSaleName'] == 'Centro'
    assert view['pointOfSaleName'] == 'Centro'
    assert view['userName'] == 'ana'
    assert view['date'] == '2024-05-01T10:00:00Z'
    assert view['remarks'] == ''


def test_grouped_restock_has_no_total_value():
    view = EnrichmentService().enrich([grouped('restock')], full_snapshot())[0]

    assert view['totalQuantity'] == 3
    assert 'totalValue' not in view


def test_single_record_resolves_through_inventory():
    record = {'id': 3, 'transactionType': 'adjustment', 'inventoryId': 11, 'quantity': -2, 'remarks': 'merma'}

    view = EnrichmentService().enrich([record], full_snapshot())[0]

    assert view['productName'] == 'Papas'
    assert view['productSku'] == 'PAP-1'
    assert view['pointOfSaleName'] == 'Centro'
    assert view['remarks'] == 'merma'


def test_missing_collections_degrade_per_field():
    snapshot = ReferenceSnapshot(products=None, points_of_sale=POINTS_OF_SALE, users=None, inventories=INVENTORIES)
    record = {'id': 3, 'transactionType': 'sale', 'inventoryId': 10, 'quantity': 1, 'userId': 9}

    view = EnrichmentService().enrich([record], snapshot)[0]

    assert view['productName'] == 'Producto 100'
    assert view['productSku'] == 'N/A'
    assert view['pointOfSaleName'] == 'Centro'
    assert view['userName'] == 'Usuario 9'


def test_enrich_does_not_mutate_records():
    record = grouped('sale')
    EnrichmentService().enrich([record], full_snapshot())
    assert 'enrichedItems' not in record
    assert 'totalValue' not in record


def test_filter_by_text_and_type():
    service = EnrichmentService()
    views = service.enrich([
        grouped('sale'),
        {'id': 3, 'transactionType': 'adjustment', 'inventoryId': 11, 'quantity': -2, 'remarks': 'merma'},
    ], full_snapshot())

    assert [v['id'] for v in service.filter_views(views, 'coca')] == [1]
    assert [v['id'] for v in service.filter_views(views, 'MERMA')] == [3]
    assert [v['id'] for v in service.filter_views(views, '', 'adjustment')] == [3]
    assert len(service.filter_views(views, '', 'all')) == 2


def test_summary():
    service = EnrichmentService()
    views = service.enrich([grouped('sale'), grouped('sale'), grouped('restock')], full_snapshot())

    summary = service.summarize(views)

    assert summary['totalTransactions'] == 3
    assert summary['totalQuantity'] == 9
    assert summary['totalSales'] == 500
    assert summary['averageTransactionValue'] == 250
    assert summary['transactionsByType'] == {'sale': 2, 'restock': 1}


def test_views_carry_spanish_type_label():
    records = [grouped('restock'), {'id': 4, 'transactionType': 'desconocido'}]

    views = EnrichmentService().enrich(records, full_snapshot())

    assert views[0]['transactionTypeLabel'] == 'Reabastecimiento'
    assert views[1]['transactionTypeLabel'] == 'Transacción'
