"""Settings for the pytest suite.

Runs against SQLite with a local-memory cache and eager Celery tasks so no
external service is required.  ``DATABASE_URL`` still wins when exported,
which is how the row-locking tests get a real PostgreSQL/MySQL server.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-only-secret-key-not-for-production")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import BASE_DIR, REST_FRAMEWORK  # noqa: E402

from decouple import config  # noqa: E402
from dj_database_url import parse as db_url  # noqa: E402

DATABASES = {
    "default": config(
        "DATABASE_URL",
        default=f'sqlite:///{BASE_DIR / "test_db.sqlite3"}',
        cast=db_url,
    )
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": [],
}
