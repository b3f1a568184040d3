"""Game model for the catalog.

The Game row holds the metadata shown on the setup page and the inclusive
player-count range the game supports.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .expansion import Expansion, ExpansionModule
    from .step import SetupStep


class Game(Base, TimestampMixin):
    """Represents a board game with a setup step catalog.

    Attributes:
        id: Primary key (slug chosen by the admin, e.g. ``"cascadia"``)
        title: Display title
        players_min: Smallest supported player count
        players_max: Largest supported player count
        popularity: Sort weight on the home page
        tagline: Optional one-line pitch
        cover_image: Optional image reference
        rules_url: Optional link to the rulebook
    """

    __tablename__ = "games"

    # Primary key
    id: Mapped[str] = mapped_column(String, primary_key=True)

    # Basic game info
    title: Mapped[str] = mapped_column(String, nullable=False)
    players_min: Mapped[int] = mapped_column(Integer, nullable=False)
    players_max: Mapped[int] = mapped_column(Integer, nullable=False)
    popularity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tagline: Mapped[str | None] = mapped_column(String, nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String, nullable=True)
    rules_url: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    expansions: Mapped[list["Expansion"]] = relationship(
        "Expansion", back_populates="game", cascade="all, delete-orphan"
    )
    modules: Mapped[list["ExpansionModule"]] = relationship(
        "ExpansionModule", back_populates="game", cascade="all, delete-orphan"
    )
    steps: Mapped[list["SetupStep"]] = relationship(
        "SetupStep",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="SetupStep.step_order",
    )

    # Table constraints
    __table_args__ = (
        CheckConstraint("players_min >= 1", name="ck_games_players_min"),
        CheckConstraint("players_min <= players_max", name="ck_games_players_range"),
    )

    def __repr__(self) -> str:
        return f"<Game(id='{self.id}', title='{self.title}')>"
