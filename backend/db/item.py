from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.models import Cell, Item, SizeClass
from .database import Base


class StoredItem(Base):
    __tablename__ = "items"
    __table_args__ = (UniqueConstraint("row", "col", name="ux_items_row_col"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    row = Column(Integer, nullable=False)
    col = Column(Integer, nullable=False)
    is_small_box = Column(Boolean, nullable=False, default=True)
    date_created = Column(DateTime, nullable=False, server_default=func.now())
    last_updated = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    tags = relationship(
        "ItemTag",
        back_populates="item",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def to_domain(self) -> Item:
        return Item(
            name=self.name,
            quantity=self.quantity,
            location=Cell(self.row, self.col),
            size_class=SizeClass.SMALL if self.is_small_box else SizeClass.LARGE,
            tags=frozenset(t.tag for t in self.tags),
        )


# Names are unique ignoring case
Index("ux_items_name_lower", func.lower(StoredItem.name), unique=True)


class ItemTag(Base):
    __tablename__ = "tags"

    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), primary_key=True)
    tag = Column(String, primary_key=True, index=True)

    item = relationship("StoredItem", back_populates="tags")
