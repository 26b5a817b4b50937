"""
Dependency wiring for the API views.

Clients are built lazily from settings the first time they are needed and
handed to the services explicitly. Tests swap them with override().
"""
from __future__ import annotations

from django.conf import settings

from .identity import FirebaseIdentityVerifier, IdentityVerifier
from .payments import PaymentGateway, StripePaymentGateway
from .store import DocumentStore, InMemoryDocumentStore

_store: DocumentStore | None = None
_identity_verifier: IdentityVerifier | None = None
_payment_gateway: PaymentGateway | None = None


def get_store() -> DocumentStore:
    global _store
    if _store is not None:
        return _store

    if settings.USE_IN_MEMORY_STORE:
        _store = InMemoryDocumentStore()
    else:
        from .db import create_mongo_store

        _store = create_mongo_store()
    return _store


def get_identity_verifier() -> IdentityVerifier:
    global _identity_verifier
    if _identity_verifier is None:
        _identity_verifier = FirebaseIdentityVerifier()
    return _identity_verifier


def get_payment_gateway() -> PaymentGateway:
    global _payment_gateway
    if _payment_gateway is None:
        _payment_gateway = StripePaymentGateway(
            api_key=settings.STRIPE_SECRET_KEY,
            client_url=settings.CLIENT_URL,
            currency=settings.STRIPE_CURRENCY,
        )
    return _payment_gateway


def override(store=None, identity_verifier=None, payment_gateway=None):
    """Replace any of the clients, e.g. with test doubles."""
    global _store, _identity_verifier, _payment_gateway
    if store is not None:
        _store = store
    if identity_verifier is not None:
        _identity_verifier = identity_verifier
    if payment_gateway is not None:
        _payment_gateway = payment_gateway


def reset():
    global _store, _identity_verifier, _payment_gateway
    _store = None
    _identity_verifier = None
    _payment_gateway = None
