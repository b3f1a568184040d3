from .game import ExpansionRead, GameRead, ModuleRead
from .setup import SetupView
from .step import ReorderRequest, StepListResponse, StepRead

__all__ = [
    "ExpansionRead",
    "GameRead",
    "ModuleRead",
    "ReorderRequest",
    "SetupView",
    "StepListResponse",
    "StepRead",
]
