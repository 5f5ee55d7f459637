from pagedquery.core.db.base import Base, BaseModel

# Models register themselves on Base.metadata when their module is imported
__all__ = [
    "Base",
    "BaseModel",
]
