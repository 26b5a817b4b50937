import os
import random
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

LOCATIONS = {
    "Dhaka": ["Dhanmondi", "Gulshan", "Mirpur", "Savar"],
    "Chattogram": ["Patiya", "Hathazari", "Sitakunda"],
    "Sylhet": ["Beanibazar", "Golapganj", "Companiganj"],
    "Rajshahi": ["Paba", "Bagha", "Godagari"],
}
BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'O+', 'O-', 'AB+', 'AB-']

FIRST_NAMES = ["Rahim", "Karim", "Ayesha", "Fatima", "Tanvir", "Nusrat", "Sakib", "Farhana", "Imran", "Sadia"]
LAST_NAMES = ["Hossain", "Rahman", "Islam", "Ahmed", "Chowdhury", "Khan"]


def seed_donors(count=30):
    db = connect()
    users_collection = db[USERS]

    print(f"--- Seeding {count} Donors ---")

    for i in range(count):
        district = random.choice(list(LOCATIONS))
        donor = {
            "name": f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
            "email": f"donor_{i + 1}@redpulse.test",
            "role": "donor",
            "status": "active",
            "bloodGroup": random.choice(BLOOD_GROUPS),
            "district": district,
            "upazila": random.choice(LOCATIONS[district]),
        }
        # Use upsert to avoid duplicates if run multiple times
        users_collection.update_one(
            {"email": donor["email"]},
            {"$set": donor, "$setOnInsert": {"createdAt": timezone.now()}},
            upsert=True,
        )
        print(f"Seeded {donor['name']} ({donor['email']}) - {donor['bloodGroup']}, {donor['upazila']}, {district}")

    print(f"--- Successfully seeded {count} donors ---")


if __name__ == "__main__":
    seed_donors()
