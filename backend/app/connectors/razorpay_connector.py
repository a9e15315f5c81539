"""
Razorpay Connector
Handles all interactions with the Razorpay payment gateway

Author: Tawabil Engineering
Date: 2026-01-20
"""
import hmac
import hashlib
from typing import Dict, Optional
import httpx

from app.core.config import settings


def _hmac_sha256(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).hexdigest()


class RazorpayConnector:
    """
    Connector for the Razorpay Orders API

    Handles:
    - Gateway order creation
    - Checkout signature verification
    - Webhook signature verification

    With no key secret configured the connector is in demo mode:
    is_configured is False and callers skip the gateway.
    """

    def __init__(
        self,
        key_id: str = None,
        key_secret: str = None,
        webhook_secret: str = None,
        api_url: str = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Razorpay connector

        Args:
            key_id: Razorpay key id (rzp_live_... / rzp_test_...)
            key_secret: Razorpay key secret
            webhook_secret: Secret configured on the Razorpay webhook
            api_url: API base URL
            transport: Custom httpx transport (tests)
        """
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.RAZORPAY_WEBHOOK_SECRET
        self.api_url = (api_url or settings.RAZORPAY_API_URL).rstrip('/')
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    async def _post(self, path: str, payload: Dict) -> Dict:
        """POST to the Razorpay API with basic auth"""
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.post(
                f"{self.api_url}{path}",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=30.0
            )
            response.raise_for_status()
            return response.json()

    async def create_order(self, amount_paise: int, receipt: str, notes: Dict = None) -> Dict:
        """
        Create a Razorpay order

        Args:
            amount_paise: Amount in paise
            receipt: Our order id
            notes: Free-form notes stored on the gateway order

        Returns:
            Razorpay order entity (id, amount, currency, receipt, status, ...)
        """
        if not self.is_configured:
            raise ValueError("Razorpay credentials not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET")

        return await self._post('/orders', {
            'amount': amount_paise,
            'currency': settings.CURRENCY,
            'receipt': receipt,
            'notes': notes or {},
        })

    def verify_payment_signature(self, razorpay_order_id: str, razorpay_payment_id: str, signature: str) -> bool:
        """Checkout signature: HMAC-SHA256(key_secret, "<order_id>|<payment_id>")"""
        if not self.key_secret or not signature:
            return False
        expected = _hmac_sha256(
            self.key_secret,
            f"{razorpay_order_id}|{razorpay_payment_id}".encode('utf-8')
        )
        return hmac.compare_digest(expected, signature)

    def verify_webhook_signature(self, raw_body: bytes, signature: Optional[str]) -> bool:
        """Webhook signature: HMAC-SHA256(webhook_secret, raw request body)"""
        if not self.webhook_secret or not signature:
            return False
        return hmac.compare_digest(_hmac_sha256(self.webhook_secret, raw_body), signature)
