"""
Stripe Checkout integration.

The gateway only talks to Stripe; turning a paid session into a funding
record happens in FundingService.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Protocol

import stripe

from .exceptions import InvalidRequest, PaymentProviderError

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    id: str
    payment_status: str
    amount_total: Optional[int]
    payment_intent: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == 'paid'

    @property
    def transaction_id(self) -> str:
        return self.payment_intent or self.id


class PaymentGateway(Protocol):
    def create_checkout_session(self, amount_cents: int, email: str, name: Optional[str] = None) -> str:
        """Open a checkout session and return its redirect URL."""
        ...

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        ...


def to_minor_units(amount) -> int:
    """Convert a currency amount (e.g. 12.5) to cents, rejecting non-positive values."""
    if isinstance(amount, bool):
        raise InvalidRequest("Amount must be a positive number")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise InvalidRequest("Amount must be a positive number")
    if not math.isfinite(value) or value <= 0:
        raise InvalidRequest("Amount must be a positive number")
    cents = int(round(value * 100))
    if cents < 1:
        raise InvalidRequest("Amount must be a positive number")
    return cents


class StripePaymentGateway:
    """PaymentGateway backed by Stripe Checkout, using a per-call API key."""

    def __init__(self, api_key: str, client_url: str, currency: str = 'usd',
                 product_name: str = 'Blood donation fund'):
        self.api_key = api_key
        self.client_url = client_url.rstrip('/')
        self.currency = currency
        self.product_name = product_name

    def create_checkout_session(self, amount_cents: int, email: str, name: Optional[str] = None) -> str:
        if not self.api_key:
            raise PaymentProviderError("Payments are not configured")
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode='payment',
                payment_method_types=['card'],
                line_items=[
                    {
                        'price_data': {
                            'currency': self.currency,
                            'unit_amount': amount_cents,
                            'product_data': {'name': self.product_name},
                        },
                        'quantity': 1,
                    }
                ],
                customer_email=email,
                metadata={'email': email, 'name': name or ''},
                success_url=f"{self.client_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self.client_url}/funding",
            )
        except stripe.StripeError as e:
            logger.exception("Stripe checkout session creation failed")
            raise PaymentProviderError(e.user_message or str(e)) from e
        return session.url

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        if not self.api_key:
            raise PaymentProviderError("Payments are not configured")
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as e:
            logger.exception("Stripe checkout session lookup failed for %s", session_id)
            raise PaymentProviderError(e.user_message or str(e)) from e

        try:
            return _checkout_session_from_stripe(session)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.exception("Unexpected checkout session payload for %s", session_id)
            raise PaymentProviderError("Unexpected checkout session payload") from e


def _as_dict(value) -> dict:
    """Plain dict for a Stripe object (not a dict subclass in current releases)."""
    if value is None or isinstance(value, str):
        return {}
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return dict(value)


def _checkout_session_from_stripe(session) -> CheckoutSession:
    data = _as_dict(session)
    details = _as_dict(data.get('customer_details'))
    metadata = _as_dict(data.get('metadata'))

    # payment_intent is an id, or the full object when expanded
    payment_intent = data.get('payment_intent')
    if payment_intent is not None and not isinstance(payment_intent, str):
        payment_intent = _as_dict(payment_intent).get('id')

    return CheckoutSession(
        id=data['id'],
        payment_status=data.get('payment_status'),
        amount_total=data.get('amount_total'),
        payment_intent=payment_intent,
        customer_name=details.get('name') or metadata.get('name') or None,
        customer_email=details.get('email') or data.get('customer_email') or metadata.get('email'),
        url=data.get('url'),
    )
