"""
Document store abstraction over MongoDB and an in-memory implementation used
for local development and tests.

Collections are addressed by name (users, donationRequests, blogs, funding).
Filters are exact-match only, which is all the API needs.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

USERS = 'users'
DONATION_REQUESTS = 'donationRequests'
BLOGS = 'blogs'
FUNDING = 'funding'

Sort = Sequence[Tuple[str, int]]


class DocumentStore(Protocol):
    """Interface for document access."""

    def insert(self, collection: str, doc: dict) -> dict:
        ...

    def insert_if_absent(self, collection: str, key_field: str, doc: dict) -> Tuple[dict, bool]:
        ...

    def find_one(self, collection: str, filter: dict) -> Optional[dict]:
        ...

    def find(
        self,
        collection: str,
        filter: Optional[dict] = None,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[dict]:
        ...

    def count(self, collection: str, filter: Optional[dict] = None) -> int:
        ...

    def update_one(self, collection: str, filter: dict, fields: dict) -> Tuple[int, int]:
        ...

    def delete_one(self, collection: str, filter: dict) -> int:
        ...

    def ensure_indexes(self) -> None:
        ...


def parse_object_id(value) -> Optional[ObjectId]:
    """Return an ObjectId for value, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc):
    if not doc:
        return None
    doc = dict(doc)
    if '_id' in doc:
        doc['_id'] = str(doc['_id'])
    return doc


class MongoDocumentStore:
    """DocumentStore backed by a pymongo Database."""

    def __init__(self, db):
        self.db = db

    def insert(self, collection: str, doc: dict) -> dict:
        doc = dict(doc)
        result = self.db[collection].insert_one(doc)
        doc['_id'] = result.inserted_id
        return doc

    def insert_if_absent(self, collection: str, key_field: str, doc: dict) -> Tuple[dict, bool]:
        """
        Insert doc unless a document with the same key_field value exists.

        A single upsert with $setOnInsert keeps this atomic; the unique index on
        key_field turns a lost race into DuplicateKeyError, which means the
        other writer won and the document exists.
        """
        key = {key_field: doc[key_field]}
        created = False
        try:
            result = self.db[collection].update_one(key, {'$setOnInsert': doc}, upsert=True)
            created = result.upserted_id is not None
        except DuplicateKeyError:
            logger.info("Concurrent insert on %s.%s resolved to existing document", collection, key_field)
        return self.db[collection].find_one(key), created

    def find_one(self, collection: str, filter: dict) -> Optional[dict]:
        return self.db[collection].find_one(filter)

    def find(self, collection, filter=None, sort=None, skip=0, limit=0):
        cursor = self.db[collection].find(filter or {})
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, collection, filter=None):
        return self.db[collection].count_documents(filter or {})

    def update_one(self, collection, filter, fields):
        result = self.db[collection].update_one(filter, {'$set': fields})
        return result.matched_count, result.modified_count

    def delete_one(self, collection, filter):
        return self.db[collection].delete_one(filter).deleted_count

    def ensure_indexes(self) -> None:
        self.db[USERS].create_index('email', unique=True)
        self.db[USERS].create_index([('role', ASCENDING), ('bloodGroup', ASCENDING)])
        self.db[USERS].create_index([('district', ASCENDING), ('upazila', ASCENDING)])
        self.db[DONATION_REQUESTS].create_index([('requesterEmail', ASCENDING), ('createdAt', DESCENDING)])
        self.db[DONATION_REQUESTS].create_index([('status', ASCENDING), ('createdAt', DESCENDING)])
        self.db[BLOGS].create_index([('createdAt', DESCENDING)])
        self.db[FUNDING].create_index('transactionId', unique=True, sparse=True)
        self.db[FUNDING].create_index([('createdAt', DESCENDING)])
        logger.info("MongoDB indexes ensured")


def _matches(doc: dict, filter: Optional[dict]) -> bool:
    if not filter:
        return True
    return all(key in doc and doc[key] == value for key, value in filter.items())


def _sort_key(value: Any):
    # None sorts before everything else, like MongoDB's null ordering.
    return (value is not None, value)


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self, unique_keys: Optional[Dict[str, Iterable[str]]] = None):
        self.collections: Dict[str, List[dict]] = {}
        if unique_keys is None:
            unique_keys = {USERS: ['email'], FUNDING: ['transactionId']}
        self.unique_keys = {name: list(keys) for name, keys in unique_keys.items()}

    def _docs(self, collection: str) -> List[dict]:
        return self.collections.setdefault(collection, [])

    def _check_unique(self, collection: str, doc: dict) -> None:
        for key in self.unique_keys.get(collection, []):
            if doc.get(key) is None:
                continue
            for existing in self._docs(collection):
                if existing.get(key) == doc[key] and existing.get('_id') != doc.get('_id'):
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {collection} key: {key}")

    def insert(self, collection: str, doc: dict) -> dict:
        doc = copy.deepcopy(doc)
        doc.setdefault('_id', ObjectId())
        self._check_unique(collection, doc)
        self._docs(collection).append(doc)
        return copy.deepcopy(doc)

    def insert_if_absent(self, collection: str, key_field: str, doc: dict) -> Tuple[dict, bool]:
        existing = self.find_one(collection, {key_field: doc[key_field]})
        if existing is not None:
            return existing, False
        return self.insert(collection, doc), True

    def find_one(self, collection, filter):
        for doc in self._docs(collection):
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    def find(self, collection, filter=None, sort=None, skip=0, limit=0):
        docs = [doc for doc in self._docs(collection) if _matches(doc, filter)]
        # Apply sort keys last-to-first so the first key wins (stable sort).
        for field, direction in reversed(list(sort or [])):
            docs.sort(key=lambda d: _sort_key(d.get(field)), reverse=direction == DESCENDING)
        if skip:
            docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        return [copy.deepcopy(doc) for doc in docs]

    def count(self, collection, filter=None):
        return sum(1 for doc in self._docs(collection) if _matches(doc, filter))

    def update_one(self, collection, filter, fields):
        for doc in self._docs(collection):
            if not _matches(doc, filter):
                continue
            changed = {k: v for k, v in fields.items() if k not in doc or doc[k] != v}
            if not changed:
                return 1, 0
            candidate = {**doc, **copy.deepcopy(changed)}
            self._check_unique(collection, candidate)
            doc.update(copy.deepcopy(changed))
            return 1, 1
        return 0, 0

    def delete_one(self, collection, filter):
        docs = self._docs(collection)
        for index, doc in enumerate(docs):
            if _matches(doc, filter):
                del docs[index]
                return 1
        return 0

    def ensure_indexes(self) -> None:
        pass

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()
