from django.apps import AppConfig


class ApiConfig(AppConfig):
    name = 'api'
    verbose_name = 'RedPulse API'

    def ready(self):
        # Token verification needs the default Firebase app; the document
        # store and Stripe client are created lazily by api.dependencies.
        from .firebase_config import initialize_firebase
        initialize_firebase()
