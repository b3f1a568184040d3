from pydantic import BaseModel, Field

from tablesetup.domain import models as dm


class GameRead(BaseModel):
    id: str = Field(..., description="Game slug, e.g. cascadia")
    title: str = Field(..., min_length=1)
    players_min: int = Field(..., ge=1, description="Smallest supported player count")
    players_max: int = Field(..., ge=1, description="Largest supported player count")
    popularity: int = Field(default=0, description="Sort weight on the game list")
    tagline: str | None = None
    cover_image: str | None = None
    rules_url: str | None = None

    @classmethod
    def from_domain(cls, game: dm.Game) -> "GameRead":
        domain = game.player_counts
        return cls(
            id=game.id,
            title=game.title,
            players_min=domain.minimum or 1,
            players_max=domain.maximum or 1,
            popularity=game.popularity,
            tagline=game.tagline,
            cover_image=game.cover_image,
            rules_url=game.rules_url,
        )


class ExpansionRead(BaseModel):
    id: str
    name: str


class ModuleRead(BaseModel):
    id: str
    name: str
    expansion_id: str | None = Field(None, description="Owning expansion; null for base game")
    description: str | None = None

    @classmethod
    def from_domain(cls, module: dm.Module) -> "ModuleRead":
        return cls(
            id=module.id,
            name=module.name,
            expansion_id=module.expansion_id,
            description=module.description,
        )
