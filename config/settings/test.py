"""Test settings for ReCore.

SQLite by default (set DB_ENGINE and friends to run against PostgreSQL),
Celery tasks executed inline and emails kept in memory.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':  # noqa: F405
    # A file database gives every thread its own connection and lets
    # threaded tests wait on the write lock
    DATABASES['default']['TEST'] = {'NAME': BASE_DIR / 'test_db.sqlite3'}  # noqa: F405
