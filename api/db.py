import logging

from django.conf import settings
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .store import MongoDocumentStore

logger = logging.getLogger(__name__)


def connect(uri=None, db_name=None):
    """
    Open a MongoClient and return the configured database.

    Pings the deployment so a bad URI fails at startup instead of on the first
    request.
    """
    uri = uri or settings.MONGO_URI
    db_name = db_name or settings.MONGO_DB_NAME
    client = MongoClient(uri, tz_aware=True)
    try:
        client.admin.command('ping')
    except PyMongoError:
        logger.exception("Error connecting to MongoDB (DB: %s)", db_name)
        client.close()
        raise
    logger.info("Pinged your deployment. Connected to MongoDB, DB: %s", db_name)
    return client[db_name]


def create_mongo_store(uri=None, db_name=None):
    store = MongoDocumentStore(connect(uri, db_name))
    store.ensure_indexes()
    return store
