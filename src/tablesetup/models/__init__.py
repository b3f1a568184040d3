"""SQLAlchemy models for the board-game setup catalog.

This module exports all database models and the declarative base.
"""

# Base classes
from .base import Base, TimestampMixin, new_id

# Expansion and module models
from .expansion import Expansion, ExpansionModule

# Core game models
from .game import Game

# Step models
from .step import SetupStep

__all__ = [
    "Base",
    "Expansion",
    "ExpansionModule",
    "Game",
    "SetupStep",
    "TimestampMixin",
    "new_id",
]
