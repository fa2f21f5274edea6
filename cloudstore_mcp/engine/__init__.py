"""Tool execution engine: handlers that compose store and ledger calls."""

from .handlers import HandlerContext, HandlerFunc

__all__ = ["HandlerContext", "HandlerFunc"]
