"""Build and publish pipeline for the session notes site."""

__version__ = "0.1.0"
