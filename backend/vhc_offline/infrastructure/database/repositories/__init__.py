from .sqlalchemy_cache_store import SQLAlchemyCacheStore

__all__ = [
    "SQLAlchemyCacheStore",
]
