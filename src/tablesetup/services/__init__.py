"""Service layer for the setup tools.

Services depend only on the ``ISetupStorage`` protocol, so either storage
adapter (SQL or JSON snapshots) can back them:

- Use factory.py for production dependency wiring
- Inject protocol-based fakes for testing (avoid complex mocking)

Architecture:
    - CatalogLoader: Concurrent catalog fetches, stale-response suppression,
      default-game fallback
    - SetupSession: Loaded catalog bound to a selection; resolves visible steps
    - StepAdminService: Step CRUD, drag-and-drop reordering, order persistence

Production Usage:
    from tablesetup.factory import create_setup_session
    session = create_setup_session()
    await session.open("cascadia")
    steps = session.visible_steps()

Testing Usage:
    from tablesetup.services.step_admin import StepAdminService

    class FakeStorage:
        def fetch_steps(self, game_id):
            return [test_step]
        ...

    admin = StepAdminService(FakeStorage())
    await admin.load_steps("cascadia")
"""

from tablesetup.services.catalog_loader import CatalogLoader, LoadState
from tablesetup.services.setup_session import SetupSession
from tablesetup.services.step_admin import DragState, StepAdminService, persist_order

__all__ = [
    "CatalogLoader",
    "DragState",
    "LoadState",
    "SetupSession",
    "StepAdminService",
    "persist_order",
]
