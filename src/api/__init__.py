"""
HTTP layer for the Random Users service.
"""

from src.api.app import create_app

__all__ = ["create_app"]
