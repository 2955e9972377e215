from pathlib import Path
from decouple import config

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config('SECRET_KEY', default='dev-only-insecure-key')
DEBUG = config('DEBUG', default=False, cast=bool)

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='127.0.0.1,localhost',
                       cast=lambda v: [h.strip() for h in v.split(',') if h.strip()])

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'billing',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'panchayat_water.urls'
WSGI_APPLICATION = 'panchayat_water.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

DATABASES = {}
if config('DATABASE_URL', default=''):
    import dj_database_url
    DATABASES['default'] = dj_database_url.parse(config('DATABASE_URL'))
else:
    # Local development (SQLite)
    DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }

USE_TZ = True
TIME_ZONE = config('TIME_ZONE', default='Asia/Kolkata')
USE_I18N = False

STATIC_URL = '/static/'

# ── Billing engine ───────────────────────────────────────────
BILL_NUMBER_PREFIX          = config('BILL_NUMBER_PREFIX', default='WB')
BILL_NUMBER_DIGITS          = config('BILL_NUMBER_DIGITS', default=6, cast=int)
BILLING_TRANSACTION_RETRIES = config('BILLING_TRANSACTION_RETRIES', default=3, cast=int)
BILLING_RETRY_BACKOFF       = config('BILLING_RETRY_BACKOFF', default=0.05, cast=float)
BILLING_DEFAULT_DUE_DAYS    =config('BILLING_DEFAULT_DUE_DAYS', default=15, cast=int)

# ── Logging ──────────────────────────────────────────────────
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'billing': {
            'handlers': ['console'],
            'level': config('BILLING_LOG_LEVEL', default='INFO'),
        },
    },
}
