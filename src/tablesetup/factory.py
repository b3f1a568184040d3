"""Service Factory for the setup tools.

This module provides factory functions for creating service instances with
proper dependency wiring. Use these functions in production code to ensure
every service talks to the configured storage.

For testing, inject protocol-based fakes instead of using these factories.

Example:
    # Production usage
    from tablesetup.factory import create_step_admin
    admin = create_step_admin()

    # Testing usage
    from tablesetup.services.step_admin import StepAdminService

    class FakeStorage:
        def fetch_steps(self, game_id):
            return []

    admin = StepAdminService(FakeStorage())
"""

from tablesetup.config import Settings, get_settings
from tablesetup.database import create_db_engine, create_session_factory, get_session_factory
from tablesetup.interfaces import ISetupStorage
from tablesetup.repository import SqlSetupRepository
from tablesetup.services.catalog_loader import CatalogLoader
from tablesetup.services.setup_session import SetupSession
from tablesetup.services.step_admin import StepAdminService


def create_storage(settings: Settings | None = None) -> SqlSetupRepository:
    """Create the SQL-backed storage adapter.

    Args:
        settings: Settings for a dedicated engine; defaults to the shared global engine

    Returns:
        SqlSetupRepository bound to the configured engine
    """
    if settings is None:
        return SqlSetupRepository(get_session_factory())
    return SqlSetupRepository(create_session_factory(create_db_engine(settings=settings)))


def create_catalog_loader(
    storage: ISetupStorage | None = None, settings: Settings | None = None
) -> CatalogLoader:
    """Create a CatalogLoader.

    Args:
        storage: Storage adapter; defaults to :func:`create_storage`
        settings: Settings providing the default game and debug flag

    Returns:
        CatalogLoader falling back to the configured default game
    """
    storage = storage or create_storage(settings)
    settings = settings or get_settings()
    return CatalogLoader(
        storage,
        default_game_id=settings.default_game_id,
        debug=settings.debug,
    )


def create_setup_session(
    storage: ISetupStorage | None = None, settings: Settings | None = None
) -> SetupSession:
    """Create a SetupSession with its CatalogLoader dependency.

    Args:
        storage: Storage adapter; defaults to :func:`create_storage`
        settings: Settings forwarded to the loader

    Returns:
        SetupSession with an empty selection
    """
    return SetupSession(create_catalog_loader(storage, settings))


def create_step_admin(
    storage: ISetupStorage | None = None, settings: Settings | None = None
) -> StepAdminService:
    """Create a StepAdminService.

    Args:
        storage: Storage adapter; defaults to :func:`create_storage`
        settings: Settings providing the debug flag

    Returns:
        StepAdminService with no game selected
    """
    storage = storage or create_storage(settings)
    settings = settings or get_settings()
    return StepAdminService(storage, debug=settings.debug)
