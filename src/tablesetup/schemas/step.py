from typing import Any

from pydantic import BaseModel, Field

from tablesetup.domain import models as dm
from tablesetup.domain.conditions import condition_to_json


class StepRead(BaseModel):
    id: str = Field(..., description="Storage-assigned step id")
    order: int = Field(..., ge=1, description="Position within the game's setup")
    text: str
    visual_asset: str | None = None
    visual_animation: str | None = None
    conditions: dict[str, Any] = Field(
        default_factory=dict, description="Condition object; empty for unconditional steps"
    )

    @classmethod
    def from_domain(cls, step: dm.Step) -> "StepRead":
        visual = step.visual
        return cls(
            id=step.id,
            order=step.order,
            text=step.text,
            visual_asset=(visual.asset or None) if visual else None,
            visual_animation=(visual.animation or None) if visual else None,
            conditions=condition_to_json(step.condition),
        )


class StepListResponse(BaseModel):
    steps: list[StepRead]
    status_message: str = Field(default="", description="Outcome of the last admin action")
    step_id: str | None = Field(None, description="Id of a newly created step")


class ReorderRequest(BaseModel):
    source_id: str = Field(..., min_length=1, description="Step being dragged")
    target_id: str = Field(..., min_length=1, description="Step it was dropped onto")
