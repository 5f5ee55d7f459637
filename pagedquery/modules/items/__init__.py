"""Items module"""

from .models import Item
from .service import ItemService
from .schemas import CreateItemDto, CreateItemBulkDto, ItemResponse
from .router import router

__all__ = [
    "Item",
    "ItemService",
    "CreateItemDto",
    "CreateItemBulkDto",
    "ItemResponse",
    "router",
]
