"""HTTP API for the orbital pool."""

from orbital.api.main import app

__all__ = ["app"]
