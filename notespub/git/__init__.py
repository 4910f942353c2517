"""Git integration for publishing the compiled site."""

from .publisher import PublishError, Publisher, auth_config

__all__ = ["PublishError", "Publisher", "auth_config"]
