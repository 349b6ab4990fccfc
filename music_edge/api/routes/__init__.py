"""HTTP routers exposed under ``/api``."""

from .login import router as login_router  # noqa: F401
from .proxy import router as proxy_router  # noqa: F401
from .storage import router as storage_router  # noqa: F401
