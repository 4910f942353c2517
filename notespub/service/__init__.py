"""Service mode for notespub."""

from .app import create_app, queue_for_config, run_service

__all__ = ["create_app", "queue_for_config", "run_service"]
