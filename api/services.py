"""
Domain operations for users, donation requests, blogs and funding.

Services receive their collaborators explicitly; views build them per request
from api.dependencies.
"""
import logging

from django.utils import timezone
from pymongo.errors import PyMongoError

from .auth_utils import require_owner, require_owner_or_role
from .exceptions import (
    Forbidden,
    InvalidRequest,
    NotFound,
    PaymentNotCompleted,
    PaymentProviderError,
    ReconciliationError,
)
from .pagination import Page
from .payments import to_minor_units
from .store import BLOGS, DONATION_REQUESTS, FUNDING, USERS, parse_object_id, serialize_doc

logger = logging.getLogger(__name__)

NEWEST_FIRST = [('createdAt', -1)]

DONOR_SEARCH_FIELDS = ('bloodGroup', 'district', 'upazila')

# Roles allowed to act on donation requests they do not own
REQUEST_READ_ROLES = ('admin', 'volunteer')
REQUEST_UPDATE_ROLES = ('admin', 'volunteer')
REQUEST_DELETE_ROLES = ('admin',)

IMMUTABLE_REQUEST_FIELDS = ('_id', 'requesterEmail', 'createdAt')


def _require_object(data, message="Invalid data"):
    if not isinstance(data, dict) or not data:
        raise InvalidRequest(message)
    return dict(data)


def _page(store, collection, page, limit, filter=None):
    total = store.count(collection, filter)
    items = store.find(collection, filter, sort=NEWEST_FIRST, skip=(page - 1) * limit, limit=limit)
    return Page([serialize_doc(doc) for doc in items], page, limit, total)


class UserService:
    def __init__(self, store):
        self.store = store

    def register(self, data):
        """
        Create the user unless one with the same email exists.
        Returns (user, created); a duplicate performs no write.
        """
        user = _require_object(data, "Email is required")
        email = user.get('email')
        if not email or not isinstance(email, str):
            raise InvalidRequest("Email is required")

        existing = self.store.find_one(USERS, {'email': email})
        if existing:
            logger.info("User %s already exists, skipping insert", email)
            return serialize_doc(existing), False

        # Admin accounts are provisioned out of band (scripts/create_admin.py)
        if user.get('role') == 'admin':
            raise Forbidden("Admin registration is restricted")

        user.pop('_id', None)
        user.setdefault('role', 'donor')
        user.setdefault('status', 'active')
        user['createdAt'] = timezone.now()

        doc, created = self.store.insert_if_absent(USERS, 'email', user)
        if created:
            logger.info("Registered user %s (%s)", email, user['role'])
        else:
            logger.info("User %s already exists, skipping insert", email)
        return serialize_doc(doc), created

    def list(self, page, limit):
        return _page(self.store, USERS, page, limit)

    def find_by_email(self, email):
        user = self.store.find_one(USERS, {'email': email})
        if not user:
            raise NotFound("User not found")
        return serialize_doc(user)

    def find_role_by_email(self, email):
        user = self.find_by_email(email)
        return {"role": user.get('role')}

    def update_by_email(self, email, fields):
        if not isinstance(fields, dict):
            raise InvalidRequest("Invalid data")
        update = {k: v for k, v in fields.items() if k not in ('_id', 'email')}
        if not update:
            raise NotFound("User not found or no changes made")

        matched, modified = self.store.update_one(USERS, {'email': email}, update)
        if not matched or not modified:
            raise NotFound("User not found or no changes made")
        return self.find_by_email(email)

    def search_donors(self, blood_group=None, district=None, upazila=None):
        given = dict(zip(DONOR_SEARCH_FIELDS, (blood_group, district, upazila)))
        query = {field: value for field, value in given.items() if value}
        if not query:
            raise InvalidRequest("At least one of bloodGroup, district or upazila is required")
        query['role'] = 'donor'
        return [serialize_doc(doc) for doc in self.store.find(USERS, query)]


class DonationRequestService:
    def __init__(self, store):
        self.store = store

    def create(self, data, owner_email):
        request_doc = _require_object(data)
        request_doc.pop('_id', None)
        # The owner is whoever the identity provider verified
        request_doc['requesterEmail'] = owner_email
        request_doc.setdefault('status', 'pending')
        request_doc['createdAt'] = timezone.now()
        return serialize_doc(self.store.insert(DONATION_REQUESTS, request_doc))

    def list_all(self, page, limit):
        return _page(self.store, DONATION_REQUESTS, page, limit)

    def list_by_owner(self, email, principal_email):
        require_owner(principal_email, email)
        docs = self.store.find(DONATION_REQUESTS, {'requesterEmail': email}, sort=NEWEST_FIRST)
        return [serialize_doc(doc) for doc in docs]

    def list_by_status(self, status):
        if not status:
            raise InvalidRequest("Status is required")
        docs = self.store.find(DONATION_REQUESTS, {'status': status}, sort=NEWEST_FIRST)
        return [serialize_doc(doc) for doc in docs]

    def _principal_role(self, email):
        user = self.store.find_one(USERS, {'email': email})
        return user.get('role') if user else None

    def _load_authorized(self, request_id, principal_email, allowed_roles):
        oid = parse_object_id(request_id)
        doc = self.store.find_one(DONATION_REQUESTS, {'_id': oid}) if oid else None
        if not doc:
            raise NotFound("Donation request not found")

        owner = doc.get('requesterEmail')
        role = None if owner == principal_email else self._principal_role(principal_email)
        require_owner_or_role(principal_email, owner, role, allowed_roles)
        return doc

    def get(self, request_id, principal_email):
        return serialize_doc(self._load_authorized(request_id, principal_email, REQUEST_READ_ROLES))

    def update(self, request_id, fields, principal_email):
        if not isinstance(fields, dict):
            raise InvalidRequest("Invalid data")
        doc = self._load_authorized(request_id, principal_email, REQUEST_UPDATE_ROLES)

        update = {k: v for k, v in fields.items() if k not in IMMUTABLE_REQUEST_FIELDS}
        if not update:
            raise NotFound("Donation request not found or no changes made")

        matched, modified = self.store.update_one(DONATION_REQUESTS, {'_id': doc['_id']}, update)
        if not matched or not modified:
            raise NotFound("Donation request not found or no changes made")
        logger.info("Donation request %s updated by %s: %s", doc['_id'], principal_email, sorted(update))
        return serialize_doc(self.store.find_one(DONATION_REQUESTS, {'_id': doc['_id']}))

    def delete(self, request_id, principal_email):
        doc = self._load_authorized(request_id, principal_email, REQUEST_DELETE_ROLES)
        if not self.store.delete_one(DONATION_REQUESTS, {'_id': doc['_id']}):
            raise NotFound("Donation request not found")
        logger.info("Donation request %s deleted by %s", doc['_id'], principal_email)
        return {"deletedCount": 1}


class BlogService:
    def __init__(self, store):
        self.store = store

    def create(self, data):
        blog = _require_object(data)
        blog.pop('_id', None)
        blog.setdefault('status', 'draft')
        blog['createdAt'] = timezone.now()
        return serialize_doc(self.store.insert(BLOGS, blog))

    def list(self, page, limit, status=None):
        return _page(self.store, BLOGS, page, limit, {'status': status} if status else None)

    def get(self, blog_id):
        oid = parse_object_id(blog_id)
        blog = self.store.find_one(BLOGS, {'_id': oid}) if oid else None
        if not blog:
            raise NotFound("Blog not found")
        return serialize_doc(blog)


def _funding_response(doc):
    record = serialize_doc(doc)
    created_at = record.get('createdAt')
    if hasattr(created_at, 'isoformat'):
        record['createdAt'] = created_at.isoformat()
    return record


class FundingService:
    def __init__(self, store, payment_gateway=None):
        self.store = store
        self.payment_gateway = payment_gateway

    def create_checkout_session(self, amount, email, name=None):
        amount_cents = to_minor_units(amount)
        url = self.payment_gateway.create_checkout_session(amount_cents, email, name)
        logger.info("Checkout session opened for %s (%s cents)", email, amount_cents)
        return {"url": url}

    def verify_checkout_session(self, session_id):
        """
        Turn a paid checkout session into a funding record, exactly once per
        transaction. Returns (record, created); repeats return the first record.
        """
        if not session_id:
            raise InvalidRequest("Session id is required")

        try:
            session = self.payment_gateway.retrieve_checkout_session(session_id)
        except PaymentProviderError as e:
            raise ReconciliationError(str(e.detail)) from e
        except Exception as e:
            logger.exception("Checkout session %s could not be retrieved", session_id)
            raise ReconciliationError() from e

        if not session.is_paid:
            raise PaymentNotCompleted()

        record = {
            'transactionId': session.transaction_id,
            'amount': (session.amount_total or 0) / 100,
            'name': session.customer_name,
            'email': session.customer_email,
            'trackingId': session.id,
            'createdAt': timezone.now(),
        }
        try:
            doc, created = self.store.insert_if_absent(FUNDING, 'transactionId', record)
        except PyMongoError as e:
            logger.exception("Failed to store funding for session %s", session_id)
            raise ReconciliationError(str(e)) from e

        if created:
            logger.info("Recorded funding %s from %s", record['transactionId'], record['email'])
        else:
            logger.info("Session %s already reconciled as %s", session_id, doc.get('transactionId'))
        return _funding_response(doc), created

    def create(self, data, principal_email):
        funding = _require_object(data)
        to_minor_units(funding.get('amount'))
        transaction_id = funding.get('transactionId')
        if not transaction_id or not isinstance(transaction_id, str):
            raise InvalidRequest("transactionId is required")

        record = {
            'transactionId': transaction_id,
            'amount': float(funding['amount']),
            'name': funding.get('name'),
            'email': principal_email,
            'trackingId': funding.get('trackingId'),
            'createdAt': timezone.now(),
        }
        doc, created = self.store.insert_if_absent(FUNDING, 'transactionId', record)
        return _funding_response(doc), created

    def list(self, page, limit):
        return _page(self.store, FUNDING, page, limit)
