"""Expansion and module models for the catalog.

Modules belong either to an expansion or, when ``expansion_id`` is NULL, to
the base game.  Every module row also records its game so base-game modules
stay scoped to one game.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .game import Game


class Expansion(Base, TimestampMixin):
    """Represents an expansion of a game.

    Attributes:
        id: Primary key
        game_id: Owning game
        name: Display name
    """

    __tablename__ = "expansions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(
        String, ForeignKey("games.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    game: Mapped["Game"] = relationship("Game", back_populates="expansions")
    modules: Mapped[list["ExpansionModule"]] = relationship(
        "ExpansionModule", back_populates="expansion", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_expansions_game", "game_id"),)

    def __repr__(self) -> str:
        return f"<Expansion(id='{self.id}', game_id='{self.game_id}', name='{self.name}')>"


class ExpansionModule(Base, TimestampMixin):
    """Represents an optional module players can switch on.

    Attributes:
        id: Primary key
        game_id: Owning game
        expansion_id: Owning expansion, NULL for base game modules
        name: Display name
        description: Optional help text
    """

    __tablename__ = "expansion_modules"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(
        String, ForeignKey("games.id", ondelete="CASCADE"), nullable=False
    )
    expansion_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("expansions.id", ondelete="CASCADE"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    game: Mapped["Game"] = relationship("Game", back_populates="modules")
    expansion: Mapped["Expansion | None"] = relationship("Expansion", back_populates="modules")

    __table_args__ = (Index("idx_expansion_modules_owner", "game_id", "expansion_id"),)

    def __repr__(self) -> str:
        return (
            f"<ExpansionModule(id='{self.id}', expansion_id={self.expansion_id!r}, "
            f"name='{self.name}')>"
        )
