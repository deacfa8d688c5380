import os

# Must be set before config is imported anywhere
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-not-for-production")
os.environ.setdefault("DB_URI", "sqlite+aiosqlite:///./test.db")
