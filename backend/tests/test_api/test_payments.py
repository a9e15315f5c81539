"""
API tests for /api/payments

Author: Tawabil Engineering
Date: 2026-01-20
"""
import hmac
import json
import hashlib
import pytest
from unittest.mock import patch

from app.domain.order import PaymentStatus


@pytest.fixture
def order_repo():
    with patch('app.services.payment_service.OrderRepository') as MockRepo:
        yield MockRepo.return_value


class TestCreatePaymentOrder:

    def test_demo_order(self, client, order_repo, make_order, demo_gateway):
        order_repo.find_by_order_id.return_value = make_order()

        response = client.post('/api/payments/create-order', json={'order_id': 'TW-260120-ABCDEF', 'amount': 400})

        assert response.status_code == 200
        data = response.json()['data']
        assert data['id'].startswith('order_demo_')
        assert data['amount'] == 40000
        assert data['receipt'] == 'TW-260120-ABCDEF'

    @pytest.mark.parametrize("body", [{}, {'order_id': 'TW-260120-ABCDEF'}, {'amount': 400}])
    def test_missing_fields(self, client, order_repo, body):
        response = client.post('/api/payments/create-order', json=body)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Order ID and amount are required'

    def test_unknown_order(self, client, order_repo, demo_gateway):
        order_repo.find_by_order_id.return_value = None

        response = client.post('/api/payments/create-order', json={'order_id': 'TW-260120-XXXXXX', 'amount': 400})

        assert response.status_code == 404

    def test_amount_mismatch(self, client, order_repo, make_order, demo_gateway):
        order_repo.find_by_order_id.return_value = make_order()

        response = client.post('/api/payments/create-order', json={'order_id': 'TW-260120-ABCDEF', 'amount': 1})

        assert response.status_code == 400
        assert response.json()['detail'] == 'Amount mismatch'


class TestVerifyPayment:

    def test_verified(self, client, order_repo, make_order, live_gateway):
        order = make_order()
        order_repo.find_by_order_id.return_value = order
        signature = hmac.new(
            live_gateway['key_secret'].encode(), b'order_rzp_1|pay_1', hashlib.sha256
        ).hexdigest()

        response = client.post('/api/payments/verify', json={
            'order_id': 'TW-260120-ABCDEF',
            'razorpay_order_id': 'order_rzp_1',
            'razorpay_payment_id': 'pay_1',
            'razorpay_signature': signature,
        })

        assert response.status_code == 200
        body = response.json()
        assert body['message'] == 'Payment verified successfully'
        assert body['data'] == {'order_id': 'TW-260120-ABCDEF', 'payment_status': 'paid', 'status': 'confirmed'}

    def test_bad_signature(self, client, order_repo, make_order, live_gateway):
        order = make_order()
        order_repo.find_by_order_id.return_value = order

        response = client.post('/api/payments/verify', json={
            'order_id': 'TW-260120-ABCDEF',
            'razorpay_order_id': 'order_rzp_1',
            'razorpay_payment_id': 'pay_1',
            'razorpay_signature': 'forged',
        })

        assert response.status_code == 400
        assert response.json()['detail'] == 'Payment verification failed'
        assert order.payment_status == PaymentStatus.FAILED

    def test_demo_mode(self, client, order_repo, make_order, demo_gateway):
        order_repo.find_by_order_id.return_value = make_order()

        response = client.post('/api/payments/verify', json={'order_id': 'TW-260120-ABCDEF'})

        assert response.status_code == 200
        assert response.json()['message'] == 'Payment verified (demo mode)'
        assert response.json()['data']['payment_status'] == 'paid'

    def test_unknown_order(self, client, order_repo, demo_gateway):
        order_repo.find_by_order_id.return_value = None

        response = client.post('/api/payments/verify', json={'order_id': 'TW-260120-XXXXXX'})

        assert response.status_code == 404


class TestWebhook:

    def test_captured(self, client, order_repo, make_order, live_gateway):
        order = make_order()
        order_repo.find_by_razorpay_order_id.return_value = order
        raw = json.dumps({
            'event': 'payment.captured',
            'payload': {'payment': {'entity': {'id': 'pay_1', 'order_id': 'order_rzp_1'}}}
        }).encode()
        signature = hmac.new(live_gateway['webhook_secret'].encode(), raw, hashlib.sha256).hexdigest()

        response = client.post(
            '/api/payments/webhook',
            content=raw,
            headers={'Content-Type': 'application/json', 'X-Razorpay-Signature': signature}
        )

        assert response.status_code == 200
        assert response.json() == {'status': 'success'}
        assert order.payment_status == PaymentStatus.PAID

    def test_invalid_signature(self, client, order_repo, live_gateway):
        response = client.post(
            '/api/payments/webhook',
            content=b'{"event": "payment.captured"}',
            headers={'Content-Type': 'application/json', 'X-Razorpay-Signature': 'forged'}
        )

        assert response.status_code == 400
        assert response.json()['status'] == 'error'
        order_repo.find_by_razorpay_order_id.assert_not_called()

    def test_database_error_returns_500(self, client, order_repo, demo_gateway):
        order_repo.find_by_razorpay_order_id.side_effect = RuntimeError('connection lost')

        response = client.post('/api/payments/webhook', json={
            'event': 'payment.captured',
            'payload': {'payment': {'entity': {'id': 'pay_1', 'order_id': 'order_rzp_1'}}}
        })

        assert response.status_code == 500
        assert response.json()['status'] == 'error'

    def test_non_object_body_returns_400(self, client, order_repo, demo_gateway):
        response = client.post(
            '/api/payments/webhook',
            content=b'[]',
            headers={'Content-Type': 'application/json'}
        )

        assert response.status_code == 400
        assert response.json() == {'status': 'error', 'detail': 'Invalid webhook payload'}

    def test_null_payment_entity_acknowledged(self, client, order_repo, demo_gateway):
        response = client.post('/api/payments/webhook', json={
            'event': 'payment.captured',
            'payload': {'payment': None}
        })

        assert response.status_code == 200
        order_repo.find_by_razorpay_order_id.assert_not_called()
