"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_payman_client, get_registry, get_session  # noqa: F401
from .routes import router  # noqa: F401
