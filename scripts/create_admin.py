"""
Promote (or create) an admin user.

Usage: python scripts/create_admin.py admin@example.com ["Full Name"]

The email must match the Firebase account the admin signs in with.
"""
import os
import sys
from pathlib import Path

import django
from django.utils import timezone

# Setup Django Environment
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from api.db import connect
from api.store import USERS


def create_admin(email, name=None):
    db = connect()
    admin_user = {"role": "admin", "status": "active"}
    if name:
        admin_user["name"] = name

    result = db[USERS].update_one(
        {"email": email},
        {"$set": admin_user, "$setOnInsert": {"email": email, "createdAt": timezone.now()}},
        upsert=True,
    )
    action = "Created" if result.upserted_id else "Updated"
    print(f"SUCCESS: {action} admin user {email}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    create_admin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
