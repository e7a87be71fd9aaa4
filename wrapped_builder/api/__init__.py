"""HTTP API package for the report builder."""

from .server import create_app

__all__ = ["create_app"]
