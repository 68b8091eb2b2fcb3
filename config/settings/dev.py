"""Development settings for ReCore.

Extends the base settings with debug mode, the console email backend and
human readable log lines. Do not use these settings in production!
"""

import structlog

from .base import *  # noqa: F401,F403
from .base import LOGGING

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Use console email backend during development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

LOGGING['formatters']['json']['processor'] = structlog.dev.ConsoleRenderer()
