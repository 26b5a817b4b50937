import os
import sys
from pathlib import Path

import django

# Setup Django Environment
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from api.db import connect
from api.store import MongoDocumentStore


def create_indexes():
    print("--- Creating MongoDB indexes ---")
    MongoDocumentStore(connect()).ensure_indexes()
    print("--- Done ---")


if __name__ == "__main__":
    create_indexes()
