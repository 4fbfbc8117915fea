from pos_console.models import CartItem, PaymentMethod, TransactionDraft, TransactionType
from pos_console.services import PayloadService


def test_restock_payload_shapes():
    draft = TransactionDraft(
        point_of_sale_id=3,
        transaction_type=TransactionType.RESTOCK,
        remarks='compra proveedor',
        items=[
            CartItem(inventory_id=0, product_id=44, quantity=5, product_name='Gaseosa', product_sku='GAS-1'),
            CartItem(inventory_id=17, product_id=45, quantity=2, product_name='Agua', product_sku='AGU-1'),
        ],
    )

    payload = PayloadService().build(draft)

    assert payload == {
        'transactionType': 'restock',
        'remarks': 'compra proveedor',
        'items': [
            {'productId': 44, 'pointOfSaleId': 3, 'quantity': 5},
            {'inventoryId': 17, 'quantity': 2},
        ],
    }


def test_sale_payload_maps_qr_to_transfer():
    draft = TransactionDraft(
        point_of_sale_id=1,
        transaction_type=TransactionType.SALE,
        payment_method=PaymentMethod.QR,
        remarks='venta',
        discount=10,
        items=[CartItem(inventory_id=10, quantity=2, product_name='A', product_sku='A-1', price=100.0)],
    )

    payload = PayloadService().build(draft)

    assert payload['paymentMethod'] == 'transfer'
    assert payload['discount'] == 10.0
    assert isinstance(payload['discount'], float)
    assert payload['items'] == [{'inventoryId': 10, 'quantity': 2}]
    assert 'sourcePointOfSaleId' not in payload


def test_transfer_payload_carries_source_and_destination():
    draft = TransactionDraft(
        point_of_sale_id=1,
        transaction_type=TransactionType.TRANSFER,
        destination_point_of_sale_id=2,
        remarks='traslado',
        items=[CartItem(inventory_id=10, quantity=4, product_name='A', product_sku='A-1')],
    )

    payload = PayloadService().build(draft)

    assert payload['sourcePointOfSaleId'] == 1
    assert payload['destinationPointOfSaleId'] == 2
    assert 'paymentMethod' not in payload
    assert 'discount' not in payload


def test_adjustment_payload_keeps_signed_quantities():
    draft = TransactionDraft(
        point_of_sale_id=1,
        transaction_type=TransactionType.ADJUSTMENT,
        remarks='merma',
        items=[
            CartItem(inventory_id=10, quantity=-3, product_name='A', product_sku='A-1'),
            CartItem(inventory_id=11, quantity=0, product_name='B', product_sku='B-1'),
        ],
    )

    payload = PayloadService().build(draft)

    assert payload['items'] == [
        {'inventoryId': 10, 'quantity': -3},
        {'inventoryId': 11, 'quantity': 0},
    ]
