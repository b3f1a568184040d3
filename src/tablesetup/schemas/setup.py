from pydantic import BaseModel, Field

from .game import ExpansionRead, GameRead, ModuleRead
from .step import StepRead


class SetupView(BaseModel):
    """Everything the setup page renders for one selection."""

    game: GameRead
    player_count: int | None = Field(None, description="Effective player count")
    selected_expansions: list[str] = Field(default_factory=list)
    selected_modules: list[str] = Field(
        default_factory=list, description="Requested modules that are actually available"
    )
    expansions: list[ExpansionRead] = Field(default_factory=list)
    available_modules: list[ModuleRead] = Field(default_factory=list)
    expansion_summary: str = Field(..., description='"Base game only", one name, or "Multiple"')
    steps: list[StepRead] = Field(default_factory=list)
    notices: list[str] = Field(
        default_factory=list, description="Non-fatal load messages, e.g. a game fallback"
    )
