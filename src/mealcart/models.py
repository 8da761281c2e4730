"""SQLAlchemy database models."""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mealcart.database import Base


class ShoppingListRecord(Base):
    """Shopping list header: one per user and week."""

    __tablename__ = "shopping_lists"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    meal_plan_id: Mapped[str] = mapped_column(String, nullable=False)
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    items: Mapped[list["ShoppingListItemRecord"]] = relationship(
        "ShoppingListItemRecord",
        back_populates="shopping_list",
        cascade="all, delete-orphan",
        order_by="(ShoppingListItemRecord.ingredient_name, ShoppingListItemRecord.unit)",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "week_start_date", name="uq_shopping_list_user_week"),
        Index("idx_shopping_lists_user_id", "user_id"),
        Index("idx_shopping_lists_meal_plan_id", "meal_plan_id"),
    )


class ShoppingListItemRecord(Base):
    """Line item of a shopping list, identified by (ingredient_name, unit)."""

    __tablename__ = "shopping_list_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shopping_list_id: Mapped[str] = mapped_column(
        String, ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_name: Mapped[str] = mapped_column(String, nullable=False)
    unit: Mapped[str] = mapped_column(String, nullable=False)  # Base unit: ml, g, item or opaque
    quantity: Mapped[str] = mapped_column(String, nullable=False)  # Exact "numerator/denominator"
    formatted_quantity: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    is_ambiguous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_collected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    shopping_list: Mapped["ShoppingListRecord"] = relationship(
        "ShoppingListRecord", back_populates="items"
    )

    __table_args__ = (
        UniqueConstraint(
            "shopping_list_id", "ingredient_name", "unit", name="uq_shopping_list_item_key"
        ),
        Index("idx_shopping_list_items_list_id", "shopping_list_id"),
    )
