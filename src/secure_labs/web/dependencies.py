from fastapi import Request

from secure_labs.file_ops import FileOperations
from secure_labs.types import LabName
from secure_labs.web.config import LabConfig
from secure_labs.web.orders import OrderStore
from secure_labs.web.sessions import SessionStore, UserStore


class Dependencies:
    """Container for all application dependencies."""

    def __init__(
        self,
        config: LabConfig,
        file_ops: FileOperations,
        user_store: UserStore | None = None,
        session_store: SessionStore | None = None,
        order_store: OrderStore | None = None,
    ):
        self.config = config
        self.file_ops = file_ops
        self.user_store = user_store
        self.session_store = session_store or SessionStore(ttl=config.session_ttl)
        self.order_store = order_store or OrderStore()


def create_dependencies(config: LabConfig | None = None, user_store: UserStore | None = None) -> Dependencies:
    """Create dependencies with optional overrides for testing."""
    if config is None:
        config = LabConfig()

    file_ops = FileOperations(config.base_dir)
    if config.lab is LabName.CANONICALIZATION:
        # The root is fixed for the process lifetime and created once here
        file_ops.ensure_base_dir()

    if user_store is None and config.lab is LabName.AUTH:
        user_store = UserStore.with_demo_user()

    return Dependencies(config=config, file_ops=file_ops, user_store=user_store)


def get_deps(request: Request) -> Dependencies:
    """Get dependencies from app state."""
    return request.app.state.deps
