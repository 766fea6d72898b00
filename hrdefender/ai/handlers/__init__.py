"""
Handlers Module - explicit registry of invocable utility handlers.

Replaces dynamic code registration: every handler is a Python function
registered at start-up, listed and invoked by name through /functions.
"""

from hrdefender.ai.handlers.registry import HandlerDefinition, HandlerRegistry
from hrdefender.ai.handlers.builtin import register_builtin_handlers

__all__ = [
    "HandlerDefinition",
    "HandlerRegistry",
    "register_builtin_handlers",
]
