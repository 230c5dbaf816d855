# config/settings/test.py
from .base import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CENSUS_UNITS = ["HDU", "ICU", "TRANSPLANT", "4th-WARD", "WARD5"]
CENSUS_CONSULTANTS = []
