"""
Test doubles for the identity provider and the payment provider, plus a base
TestCase that wires them (and an in-memory store) into api.dependencies.
"""
import unittest

from rest_framework.test import APIClient

from api import dependencies
from api.exceptions import PaymentProviderError, Unauthenticated
from api.payments import CheckoutSession
from api.store import InMemoryDocumentStore


class FakeIdentityVerifier:
    """Accepts tokens of the form 'token-<email>'."""

    def __init__(self):
        self.calls = []

    def verify(self, token):
        self.calls.append(token)
        if not token.startswith('token-') or len(token) <= len('token-'):
            raise Unauthenticated()
        return token[len('token-'):]


class FakePaymentGateway:
    def __init__(self):
        self.sessions = {}
        self.created = []

    def add_session(self, session_id, payment_status='paid', amount_total=2500,
                    payment_intent='pi_123', name='Rahim Hossain', email='rahim@example.com'):
        session = CheckoutSession(
            id=session_id,
            payment_status=payment_status,
            amount_total=amount_total,
            payment_intent=payment_intent,
            customer_name=name,
            customer_email=email,
        )
        self.sessions[session_id] = session
        return session

    def create_checkout_session(self, amount_cents, email, name=None):
        self.created.append((amount_cents, email, name))
        return f"https://checkout.stripe.test/c/pay/cs_test_{len(self.created)}"

    def retrieve_checkout_session(self, session_id):
        if session_id not in self.sessions:
            raise PaymentProviderError(f"No such checkout.session: '{session_id}'")
        return self.sessions[session_id]


def bearer(email):
    return {'HTTP_AUTHORIZATION': f'Bearer token-{email}'}


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.verifier = FakeIdentityVerifier()
        self.gateway = FakePaymentGateway()
        dependencies.override(
            store=self.store,
            identity_verifier=self.verifier,
            payment_gateway=self.gateway,
        )
        self.client = APIClient()

    def tearDown(self):
        dependencies.reset()
