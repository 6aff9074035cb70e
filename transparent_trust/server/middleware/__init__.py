"""Middleware for the Transparent Trust server."""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
