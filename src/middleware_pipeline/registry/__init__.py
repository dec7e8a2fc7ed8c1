"""
Registry Module - Named Middleware Management.

Components:
    - MiddlewareRegistry: registration, ordered enabling, composition
    - MiddlewareInfo: metadata about registered middlewares
"""

from middleware_pipeline.registry.middleware_registry import (
    MiddlewareFactory,
    MiddlewareInfo,
    MiddlewareRegistry,
)

__all__ = [
    "MiddlewareFactory",
    "MiddlewareInfo",
    "MiddlewareRegistry",
]
