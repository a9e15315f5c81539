"""
Payment Service
Razorpay order creation, checkout verification and webhook handling

Every payment callback funnels into the Order domain methods, which are
idempotent, so a webhook arriving after (or instead of) the checkout
callback leaves the order in the same state.

Author: Tawabil Engineering
Date: 2026-01-20
"""
import json
import time
import logging
from typing import Dict, Optional
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import settings
from app.connectors.razorpay_connector import RazorpayConnector
from app.domain.order import Order, OrderStatus
from app.repositories.order_repository import OrderRepository
from app.services.exceptions import (
    OrderNotFoundError,
    PaymentError,
    PaymentVerificationError,
)

logger = logging.getLogger(__name__)


def _round_rupees(amount) -> Decimal:
    return Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def _as_dict(value) -> Dict:
    return value if isinstance(value, dict) else {}


def _entity(payload: Dict, name: str) -> Dict:
    """payload.<name>.entity from a webhook body, {} when absent or malformed"""
    return _as_dict(_as_dict(payload.get(name)).get('entity'))


class PaymentService:
    """
    Service for online payments

    Handles:
    - Creating gateway orders (or demo orders when the gateway is not configured)
    - Verifying checkout signatures
    - payment.captured / payment.failed / refund.processed webhooks
    """

    def __init__(
        self,
        order_repo: Optional[OrderRepository] = None,
        connector: Optional[RazorpayConnector] = None
    ):
        self.order_repo = order_repo or OrderRepository()
        self.connector = connector or RazorpayConnector()

    def _get_order(self, order_id: str) -> Order:
        order = self.order_repo.find_by_order_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def create_gateway_order(self, order_id: str, amount) -> Dict:
        """
        Create the Razorpay order a checkout will pay against

        Args:
            order_id: Our public order id
            amount: Amount the storefront is about to charge (INR)

        Returns:
            Dict with id, amount (paise), currency and receipt

        Raises:
            OrderNotFoundError
            PaymentError: amount mismatch, or order already paid/cancelled
        """
        order = self._get_order(order_id)

        if _round_rupees(amount) != _round_rupees(order.total):
            logger.warning(f"Amount mismatch for order {order_id}: got {amount}, expected {order.total}")
            raise PaymentError("Amount mismatch")

        if order.is_paid:
            raise PaymentError("Order is already paid")

        if order.status == OrderStatus.CANCELLED:
            raise PaymentError("Order is cancelled")

        if not self.connector.is_configured:
            logger.info(f"Razorpay not configured, returning demo order for {order_id}")
            return {
                'id': f"order_demo_{int(time.time() * 1000)}",
                'amount': order.amount_in_paise,
                'currency': settings.CURRENCY,
                'receipt': order.order_id,
                'status': 'created',
            }

        gateway_order = await self.connector.create_order(
            amount_paise=order.amount_in_paise,
            receipt=order.order_id,
            notes={
                'order_id': order.order_id,
                'customer_phone': order.customer.phone,
            }
        )

        order.razorpay_order_id = gateway_order['id']
        self.order_repo.update_state(order)
        logger.info(f"Razorpay order {gateway_order['id']} created for {order_id}")

        return {
            'id': gateway_order['id'],
            'amount': gateway_order['amount'],
            'currency': gateway_order['currency'],
            'receipt': gateway_order['receipt'],
        }

    def verify_payment(
        self,
        order_id: str,
        razorpay_order_id: Optional[str],
        razorpay_payment_id: Optional[str],
        razorpay_signature: Optional[str]
    ) -> Order:
        """
        Verify a checkout callback and mark the order paid

        Raises:
            OrderNotFoundError
            PaymentVerificationError: bad signature or gateway order mismatch
        """
        order = self._get_order(order_id)

        if not self.connector.key_secret:
            if order.mark_paid(razorpay_payment_id or 'demo_payment', razorpay_signature or 'demo_signature'):
                self.order_repo.update_state(order)
                logger.info(f"Order {order_id} marked paid (demo mode)")
                self._warn_if_cancelled(order)
            return order

        if order.is_paid:
            return order

        signature_ok = self.connector.verify_payment_signature(
            razorpay_order_id, razorpay_payment_id, razorpay_signature
        )
        reference_ok = order.razorpay_order_id is None or order.razorpay_order_id == razorpay_order_id

        if not (signature_ok and reference_ok):
            logger.warning(
                f"Payment verification failed for order {order_id} "
                f"(signature_ok={signature_ok}, reference_ok={reference_ok})"
            )
            if order.mark_payment_failed():
                self.order_repo.update_state(order)
            raise PaymentVerificationError("Payment verification failed")

        if order.razorpay_order_id is None:
            order.razorpay_order_id = razorpay_order_id
        newly_paid = order.mark_paid(razorpay_payment_id, razorpay_signature)
        self.order_repo.update_state(order)
        logger.info(f"Order {order_id} payment verified: {razorpay_payment_id}")
        if newly_paid:
            self._warn_if_cancelled(order)

        return order

    @staticmethod
    def _warn_if_cancelled(order: Order):
        """A payment captured on a cancelled order needs a manual refund"""
        if order.status == OrderStatus.CANCELLED:
            logger.warning(
                f"Payment {order.razorpay_payment_id} captured for cancelled order "
                f"{order.order_id}, refund required"
            )

    def handle_webhook(self, raw_body: bytes, signature: Optional[str]) -> str:
        """
        Process a Razorpay webhook

        The signature is checked over the raw body when a webhook secret is
        configured.

        Returns:
            The event name

        Raises:
            PaymentVerificationError: bad signature or unreadable body
        """
        if self.connector.webhook_secret:
            if not self.connector.verify_webhook_signature(raw_body, signature):
                logger.warning("Invalid webhook signature")
                raise PaymentVerificationError("Invalid webhook signature")

        try:
            event = json.loads(raw_body or b'{}')
        except ValueError:
            raise PaymentVerificationError("Invalid webhook payload")

        if not isinstance(event, dict):
            raise PaymentVerificationError("Invalid webhook payload")

        event_name = event.get('event')
        payload = _as_dict(event.get('payload'))

        if event_name == 'payment.captured':
            self._handle_payment_captured(_entity(payload, 'payment'))
        elif event_name == 'payment.failed':
            self._handle_payment_failed(_entity(payload, 'payment'))
        elif event_name == 'refund.processed':
            self._handle_refund_processed(_entity(payload, 'refund'))
        else:
            logger.info(f"Unhandled webhook event: {event_name}")

        return event_name

    def _handle_payment_captured(self, payment: Dict):
        if not payment.get('order_id'):
            logger.warning("payment.captured without a Razorpay order id")
            return

        order = self.order_repo.find_by_razorpay_order_id(payment.get('order_id'))
        if order is None:
            logger.warning(f"payment.captured for unknown Razorpay order {payment.get('order_id')}")
            return

        if order.mark_paid(payment.get('id')):
            self.order_repo.update_state(order)
            logger.info(f"Order {order.order_id} payment confirmed via webhook")
            self._warn_if_cancelled(order)

    def _handle_payment_failed(self, payment: Dict):
        if not payment.get('order_id'):
            logger.warning("payment.failed without a Razorpay order id")
            return

        order = self.order_repo.find_by_razorpay_order_id(payment.get('order_id'))
        if order is None:
            logger.warning(f"payment.failed for unknown Razorpay order {payment.get('order_id')}")
            return

        if order.mark_payment_failed():
            self.order_repo.update_state(order)
            logger.info(f"Order {order.order_id} payment failed")

    def _handle_refund_processed(self, refund: Dict):
        if not refund.get('payment_id'):
            logger.warning("refund.processed without a Razorpay payment id")
            return

        order = self.order_repo.find_by_razorpay_payment_id(refund.get('payment_id'))
        if order is None:
            logger.warning(f"refund.processed for unknown Razorpay payment {refund.get('payment_id')}")
            return

        if order.mark_refunded():
            self.order_repo.update_state(order)
            logger.info(f"Order {order.order_id} refunded")
