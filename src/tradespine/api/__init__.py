"""
HTTP surface for trade-spine.

Usage::

    uvicorn tradespine.api:create_app --factory
"""

from tradespine.api.app import create_app

__all__ = ["create_app"]
