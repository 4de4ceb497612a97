"""
Receipt processing tests.

Verifies:
- received receipts create unknown SKUs and add stock to known ones
- sent receipts never drive stock negative and open exactly one delivery
- a rejected receipt leaves no trace (no stock change, receipt or delivery)
"""

import pytest

from tests.conftest import post_receipt, line, products_by_sku


def _receipt_count(client, headers) -> int:
    return client.get('/orders/receipt', headers=headers).get_json()['count']


def _deliveries(client, headers) -> list:
    return client.get('/orders/delivery', headers=headers).get_json()['deliveryorders']


SHIPPING = {'recipientName': 'Dana Customer', 'shippingAddress': '12 High Street'}


class TestReceivedReceipts:

    def test_new_sku_creates_product_with_quantity_as_stock(self, client, user_headers):
        resp = post_receipt(client, user_headers, order_no=100, products=[line('NEW-1', 7)])
        assert resp.status_code == 201

        products = products_by_sku(client, user_headers)
        assert products['NEW-1']['stock'] == 7
        assert products['NEW-1']['unit'] == 'unit'
        assert products['NEW-1']['location'] == 'Main warehouse'

    def test_repeat_sku_accumulates_without_duplicating(self, client, user_headers):
        post_receipt(client, user_headers, order_no=1, products=[line('REP-1', 4)])
        post_receipt(client, user_headers, order_no=2, products=[line('REP-1', 6)])

        resp = client.get('/products', headers=user_headers).get_json()
        assert resp['count'] == 1
        assert resp['products'][0]['stock'] == 10

    def test_same_sku_twice_in_one_receipt(self, client, user_headers):
        resp = post_receipt(client, user_headers, order_no=1, products=[line('TW-1', 2), line('TW-1', 3)])
        assert resp.status_code == 201
        assert products_by_sku(client, user_headers)['TW-1']['stock'] == 5

    def test_receipt_body(self, client, user_headers):
        resp = post_receipt(
            client, user_headers, order_no=55,
            products=[line('B-1', 2, unit_price=1.5), line('B-2', 4, unit_price=0.25)],
        )
        receipt = resp.get_json()
        assert receipt['order_no'] == 55
        assert receipt['supplier'] == 'Acme Supply'
        assert receipt['order_type'] == 'received'
        assert receipt['totalamount'] == pytest.approx(4.0)
        assert [p['SKUcode'] for p in receipt['products']] == ['B-1', 'B-2']
        assert all(p['productId'] for p in receipt['products'])

    def test_order_type_defaults_to_received(self, client, user_headers):
        resp = client.post('/orders/receipt', json={
            'order_no': 9, 'supplier': 'Acme', 'products': [line('D-1', 1)],
        }, headers=user_headers)
        assert resp.status_code == 201
        assert resp.get_json()['order_type'] == 'received'

    def test_zero_unit_price_is_allowed(self, client, user_headers):
        resp = post_receipt(client, user_headers, order_no=3, products=[line('FREE-1', 1, unit_price=0)])
        assert resp.status_code == 201
        assert resp.get_json()['totalamount'] == 0

    def test_new_sku_missing_creation_fields_rejected(self, client, user_headers):
        resp = post_receipt(client, user_headers, order_no=4, products=[
            line('OK-1', 1),
            {'SKUcode': 'BARE-1', 'quantity': 2, 'unitPrice': 1},
        ])
        assert resp.status_code == 400
        assert 'BARE-1' in resp.get_json()['error']
        # first line was rolled back too
        assert products_by_sku(client, user_headers) == {}
        assert _receipt_count(client, user_headers) == 0

    def test_existing_sku_needs_only_quantity_and_price(self, client, user_headers):
        post_receipt(client, user_headers, order_no=1, products=[line('K-1', 1)])

        resp = post_receipt(client, user_headers, order_no=2, products=[
            {'SKUcode': 'K-1', 'quantity': 2, 'unitPrice': 1},
        ])
        assert resp.status_code == 201
        assert products_by_sku(client, user_headers)['K-1']['stock'] == 3


class TestReceiptValidation:

    @pytest.mark.parametrize("item", [
        line('V-1', 0),
        line('V-1', -2),
        line('V-1', 1.5),
        line('V-1', 1, unit_price=-1),
        {'SKUcode': 'V-1', 'name': 'x', 'category': 'y', 'price': 1, 'unitPrice': 1},
        {'SKUcode': 'V-1', 'name': 'x', 'category': 'y', 'price': 1, 'quantity': 1},
    ])
    def test_bad_line_rejects_whole_receipt(self, client, user_headers, item):
        resp = post_receipt(client, user_headers, order_no=1, products=[line('GOOD-1', 5), item])
        assert resp.status_code == 400
        assert products_by_sku(client, user_headers) == {}
        assert _receipt_count(client, user_headers) == 0

    @pytest.mark.parametrize("body", [
        {'supplier': 'Acme', 'products': [line('H-1', 1)]},
        {'order_no': 1, 'products': [line('H-1', 1)]},
        {'order_no': 1, 'supplier': '   ', 'products': [line('H-1', 1)]},
        {'order_no': 'abc', 'supplier': 'Acme', 'products': [line('H-1', 1)]},
        {'order_no': 0, 'supplier': 'Acme', 'products': [line('H-1', 1)]},
        {'order_no': -5, 'supplier': 'Acme', 'products': [line('H-1', 1)]},
        {'order_no': 1, 'supplier': 'Acme', 'products': []},
        {'order_no': 1, 'supplier': 'Acme'},
        {'order_no': 1, 'supplier': 'Acme', 'order_type': 'lost', 'products': [line('H-1', 1)]},
    ])
    def test_bad_header_rejected_before_any_change(self, client, user_headers, body):
        resp = client.post('/orders/receipt', json=body, headers=user_headers)
        assert resp.status_code == 400
        assert products_by_sku(client, user_headers) == {}


class TestSentReceipts:

    @pytest.fixture
    def stocked(self, client, user_headers):
        post_receipt(client, user_headers, order_no=1, products=[line('S-1', 10), line('S-2', 3)])

    def test_sent_decrements_stock_and_opens_delivery(self, client, user_headers, stocked):
        resp = post_receipt(
            client, user_headers, order_no=500, order_type='sent',
            products=[line('S-1', 4)], **SHIPPING,
        )
        assert resp.status_code == 201
        assert products_by_sku(client, user_headers)['S-1']['stock'] == 6

        deliveries = _deliveries(client, user_headers)
        assert len(deliveries) == 1
        delivery = deliveries[0]
        assert delivery['deliveryStatus'] == 'Pending'
        assert delivery['orderNumber'] == 500
        assert delivery['receiptId'] == resp.get_json()['id']
        assert delivery['recipientName'] == 'Dana Customer'
        assert delivery['shippingAddress'] == '12 High Street'
        assert delivery['shippedDate'] is not None

    def test_received_receipt_opens_no_delivery(self, client, user_headers, stocked):
        assert _deliveries(client, user_headers) == []

    def test_sent_more_than_stock_is_400_and_unchanged(self, client, user_headers, stocked):
        resp = post_receipt(
            client, user_headers, order_no=501, order_type='sent',
            products=[line('S-2', 4)], **SHIPPING,
        )
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Insufficient stock for product S-2. Available: 3'
        assert products_by_sku(client, user_headers)['S-2']['stock'] == 3
        assert _deliveries(client, user_headers) == []

    def test_sent_exact_stock_reaches_zero(self, client, user_headers, stocked):
        resp = post_receipt(
            client, user_headers, order_no=502, order_type='sent',
            products=[line('S-2', 3)], **SHIPPING,
        )
        assert resp.status_code == 201
        assert products_by_sku(client, user_headers)['S-2']['stock'] == 0

    def test_failing_later_line_rolls_back_earlier_lines(self, client, user_headers, stocked):
        resp = post_receipt(
            client, user_headers, order_no=503, order_type='sent',
            products=[line('S-1', 5), line('S-2', 99)], **SHIPPING,
        )
        assert resp.status_code == 400

        products = products_by_sku(client, user_headers)
        assert products['S-1']['stock'] == 10
        assert products['S-2']['stock'] == 3
        assert _receipt_count(client, user_headers) == 1

    def test_repeated_sku_lines_are_checked_cumulatively(self, client, user_headers, stocked):
        resp = post_receipt(
            client, user_headers, order_no=504, order_type='sent',
            products=[line('S-2', 2), line('S-2', 2)], **SHIPPING,
        )
        assert resp.status_code == 400
        assert products_by_sku(client, user_headers)['S-2']['stock'] == 3

    def test_unknown_sku_is_404(self, client, user_headers, stocked):
        resp = post_receipt(
            client, user_headers, order_no=505, order_type='sent',
            products=[line('NOPE', 1)], **SHIPPING,
        )
        assert resp.status_code == 404
        assert resp.get_json()['error'] == 'Product is not available'
        assert 'NOPE' not in products_by_sku(client, user_headers)

    @pytest.mark.parametrize("missing", ["recipientName", "shippingAddress"])
    def test_missing_recipient_field_persists_nothing(self, client, user_headers, stocked, missing):
        shipping = dict(SHIPPING)
        shipping.pop(missing)

        resp = post_receipt(
            client, user_headers, order_no=506, order_type='sent',
            products=[line('S-1', 1)], **shipping,
        )
        assert resp.status_code == 400
        assert products_by_sku(client, user_headers)['S-1']['stock'] == 10
        assert _receipt_count(client, user_headers) == 1
        assert _deliveries(client, user_headers) == []

    def test_order_number_reuse_for_delivery_rejected(self, client, user_headers, stocked):
        first = post_receipt(
            client, user_headers, order_no=507, order_type='sent',
            products=[line('S-1', 1)], **SHIPPING,
        )
        assert first.status_code == 201

        second = post_receipt(
            client, user_headers, order_no=507, order_type='sent',
            products=[line('S-1', 1)], **SHIPPING,
        )
        assert second.status_code == 400
        assert products_by_sku(client, user_headers)['S-1']['stock'] == 9
        assert len(_deliveries(client, user_headers)) == 1


class TestListings:

    def test_receipts_newest_first(self, client, user_headers):
        post_receipt(client, user_headers, order_no=1, products=[line('L-1', 1)])
        post_receipt(client, user_headers, order_no=2, products=[line('L-1', 1)])

        data = client.get('/orders/receipt', headers=user_headers).get_json()
        assert data['count'] == 2
        assert [r['order_no'] for r in data['receipts']] == [2, 1]
