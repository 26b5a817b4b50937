import os

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
os.environ['USE_IN_MEMORY_STORE'] = 'true'
os.environ['DJANGO_ALLOWED_HOSTS'] = 'testserver,localhost'
os.environ['DJANGO_DEBUG'] = 'false'
os.environ['DEFAULT_PAGE_SIZE'] = '5'
os.environ['MAX_PAGE_SIZE'] = '50'
os.environ['STRIPE_SECRET_KEY'] = 'sk_test_dummy'
os.environ['CLIENT_URL'] = 'http://localhost:5173'

django.setup()
