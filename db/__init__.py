"""
db - Database layer.

Public API:
    init_db()                  → create engine + tables
    get_session()              → new Session
    session_scope()            → context-managed Session
    Product, Category, Brand   → ORM models
"""

from db.engine import init_db, get_session, session_scope, ping   # noqa: F401
from db.models import Base, Product, Category, Brand               # noqa: F401
