import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from api.store import (
    FUNDING,
    USERS,
    InMemoryDocumentStore,
    MongoDocumentStore,
    parse_object_id,
    serialize_doc,
)


class InMemoryDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()

    def test_insert_assigns_id(self):
        doc = self.store.insert(USERS, {"email": "a@example.com"})
        self.assertIsInstance(doc["_id"], ObjectId)
        self.assertEqual(self.store.count(USERS), 1)

    def test_insert_if_absent_is_idempotent(self):
        first, created = self.store.insert_if_absent(USERS, "email", {"email": "a@example.com", "name": "A"})
        self.assertTrue(created)
        second, created = self.store.insert_if_absent(USERS, "email", {"email": "a@example.com", "name": "B"})
        self.assertFalse(created)
        self.assertEqual(second["_id"], first["_id"])
        self.assertEqual(second["name"], "A")
        self.assertEqual(self.store.count(USERS), 1)

    def test_unique_key_enforced_on_plain_insert(self):
        self.store.insert(FUNDING, {"transactionId": "pi_1"})
        with self.assertRaises(DuplicateKeyError):
            self.store.insert(FUNDING, {"transactionId": "pi_1"})

    def test_find_sorts_skips_and_limits(self):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(7):
            self.store.insert("blogs", {"n": i, "createdAt": base + timedelta(days=i)})
        docs = self.store.find("blogs", sort=[("createdAt", -1)], skip=2, limit=3)
        self.assertEqual([d["n"] for d in docs], [4, 3, 2])

    def test_find_exact_match(self):
        self.store.insert(USERS, {"email": "a@example.com", "role": "donor"})
        self.store.insert(USERS, {"email": "b@example.com", "role": "admin"})
        self.store.insert(USERS, {"email": "c@example.com"})
        self.assertEqual([d["email"] for d in self.store.find(USERS, {"role": "donor"})], ["a@example.com"])

    def test_update_one_reports_matched_and_modified(self):
        self.store.insert(USERS, {"email": "a@example.com", "status": "active"})
        self.assertEqual(self.store.update_one(USERS, {"email": "a@example.com"}, {"status": "blocked"}), (1, 1))
        self.assertEqual(self.store.update_one(USERS, {"email": "a@example.com"}, {"status": "blocked"}), (1, 0))
        self.assertEqual(self.store.update_one(USERS, {"email": "x@example.com"}, {"status": "blocked"}), (0, 0))

    def test_returned_documents_are_copies(self):
        self.store.insert(USERS, {"email": "a@example.com", "tags": ["x"]})
        doc = self.store.find_one(USERS, {"email": "a@example.com"})
        doc["tags"].append("y")
        self.assertEqual(self.store.find_one(USERS, {"email": "a@example.com"})["tags"], ["x"])

    def test_delete_one(self):
        doc = self.store.insert("blogs", {"title": "t"})
        self.assertEqual(self.store.delete_one("blogs", {"_id": doc["_id"]}), 1)
        self.assertEqual(self.store.delete_one("blogs", {"_id": doc["_id"]}), 0)


class MongoDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.db = MagicMock()
        self.collection = self.db.__getitem__.return_value
        self.store = MongoDocumentStore(self.db)

    def test_insert_if_absent_uses_single_upsert(self):
        self.collection.update_one.return_value = MagicMock(upserted_id=ObjectId())
        self.collection.find_one.return_value = {"transactionId": "pi_1"}

        doc, created = self.store.insert_if_absent(FUNDING, "transactionId", {"transactionId": "pi_1", "amount": 5})

        self.assertTrue(created)
        self.assertEqual(doc, {"transactionId": "pi_1"})
        self.collection.update_one.assert_called_once_with(
            {"transactionId": "pi_1"},
            {"$setOnInsert": {"transactionId": "pi_1", "amount": 5}},
            upsert=True,
        )
        self.collection.insert_one.assert_not_called()

    def test_insert_if_absent_existing(self):
        self.collection.update_one.return_value = MagicMock(upserted_id=None)
        self.collection.find_one.return_value = {"email": "a@example.com"}
        _, created = self.store.insert_if_absent(USERS, "email", {"email": "a@example.com"})
        self.assertFalse(created)

    def test_insert_if_absent_lost_race(self):
        self.collection.update_one.side_effect = DuplicateKeyError("E11000 duplicate key error")
        self.collection.find_one.return_value = {"email": "a@example.com"}
        doc, created = self.store.insert_if_absent(USERS, "email", {"email": "a@example.com"})
        self.assertFalse(created)
        self.assertEqual(doc, {"email": "a@example.com"})

    def test_ensure_indexes_declares_unique_keys(self):
        self.store.ensure_indexes()
        calls = self.collection.create_index.call_args_list
        self.assertIn((("email",), {"unique": True}), [(c.args, c.kwargs) for c in calls])
        self.assertIn((("transactionId",), {"unique": True, "sparse": True}), [(c.args, c.kwargs) for c in calls])


class HelperTests(unittest.TestCase):
    def test_parse_object_id(self):
        oid = ObjectId()
        self.assertEqual(parse_object_id(str(oid)), oid)
        self.assertIsNone(parse_object_id("not-an-id"))
        self.assertIsNone(parse_object_id(None))

    def test_serialize_doc_stringifies_id(self):
        oid = ObjectId()
        self.assertEqual(serialize_doc({"_id": oid, "a": 1}), {"_id": str(oid), "a": 1})
        self.assertIsNone(serialize_doc(None))
