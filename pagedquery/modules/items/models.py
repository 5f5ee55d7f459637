from decimal import Decimal
from sqlalchemy import String, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from pagedquery.core.db.base import BaseModel


class Item(BaseModel):
    """
    Item model - the table served by the paged demo endpoints.
    """

    __tablename__ = "item"

    __table_args__ = (Index("idx_item_category", "category"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[str] = mapped_column(String(255), nullable=False)

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=Decimal("0")
    )

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name='{self.name}', category='{self.category}')>"
