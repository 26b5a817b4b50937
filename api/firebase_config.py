import json
import logging
from pathlib import Path

import firebase_admin
from django.conf import settings
from firebase_admin import credentials

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

# Local fallbacks when no credentials are configured in the environment
possible_paths = [
    BASE_DIR / 'config' / 'serviceAccountKey.json',
    BASE_DIR / 'serviceAccountKey.json',
]


def _load_certificate(raw):
    """
    FIREBASE_CREDENTIALS holds either the service account JSON itself or a
    path to it.
    """
    raw = raw.strip()
    if raw.startswith('{'):
        return credentials.Certificate(json.loads(raw))
    return credentials.Certificate(raw)


def initialize_firebase():
    """Initialize the default Firebase app once. Returns True when available."""
    if firebase_admin._apps:
        return True

    try:
        # 1. Environment (FB_SERVICE_KEY / FIREBASE_CREDENTIALS)
        raw = getattr(settings, 'FIREBASE_CREDENTIALS', None)
        if raw:
            firebase_admin.initialize_app(_load_certificate(raw))
            logger.info("Firebase Admin initialized from environment")
            return True

        # 2. Local file
        for path in possible_paths:
            if path.exists():
                firebase_admin.initialize_app(credentials.Certificate(str(path)))
                logger.info("Firebase Admin initialized with file: %s", path)
                return True
    except (ValueError, OSError):
        logger.exception("Failed to initialize Firebase")
        return False

    logger.warning(
        "Firebase credentials not found (FB_SERVICE_KEY / FIREBASE_CREDENTIALS). "
        "Authenticated routes will reject every token."
    )
    return False
