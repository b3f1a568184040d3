"""Storage adapters implementing :class:`tablesetup.interfaces.ISetupStorage`."""

from tablesetup.repository.json_store import JsonCatalogRepository
from tablesetup.repository.sql_store import SqlSetupRepository

__all__ = [
    "JsonCatalogRepository",
    "SqlSetupRepository",
]
