"""Setup step model for the catalog.

Applicability conditions live in one JSON ``conditions`` column keyed by
``playerCounts``, ``includeExpansions`` and friends, with empty arrays and
``false`` flags stripped.  ``step_order`` is deliberately not UNIQUE: a
reorder writes one row at a time, so two rows may briefly share an order.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .game import Game


class SetupStep(Base, TimestampMixin):
    """Represents one setup instruction of a game.

    Attributes:
        id: Primary key
        game_id: Owning game
        step_order: Position in the game's setup sequence (1-based)
        text: Instruction text
        visual_asset: Optional asset reference
        visual_animation: Optional animation name
        conditions: JSON object describing when the step applies
    """

    __tablename__ = "steps"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(
        String, ForeignKey("games.id", ondelete="CASCADE"), nullable=False
    )
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    visual_asset: Mapped[str | None] = mapped_column(String, nullable=True)
    visual_animation: Mapped[str | None] = mapped_column(String, nullable=True)
    conditions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Relationships
    game: Mapped["Game"] = relationship("Game", back_populates="steps")

    __table_args__ = (
        CheckConstraint("step_order >= 1", name="ck_steps_order_positive"),
        CheckConstraint("length(text) > 0", name="ck_steps_text_not_empty"),
        Index("idx_steps_game_order", "game_id", "step_order"),
    )

    def __repr__(self) -> str:
        return f"<SetupStep(id='{self.id}', game_id='{self.game_id}', order={self.step_order})>"
