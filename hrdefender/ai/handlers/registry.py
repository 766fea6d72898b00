"""
Handler Registry - named, statically defined utility handlers.

Clients can list the handlers and invoke one by name with JSON parameters.
Handlers are plain Python functions registered at start-up; the HTTP surface
can never register new code.

Usage:
======
```python
registry = HandlerRegistry()
register_builtin_handlers(registry)

# Validate parameters
is_valid, error = registry.validate("word_count", {"text": "..."})

# Invoke (sync or async handlers)
result = await registry.invoke("detect_document_type", {"content": "..."})
```
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Set, Callable

from hrdefender.core.errors import HandlerNotFoundError, HandlerValidationError


logger = logging.getLogger("hrdefender.ai.handlers.registry")


# ---------------------------------------------------------------------------
# HANDLER DEFINITION
# ---------------------------------------------------------------------------

@dataclass
class HandlerDefinition:
    """
    Definition of a handler clients can invoke.

    Attributes:
        name: Unique handler identifier (e.g., "word_count")
        description: Human-readable description
        func: The callable, sync or async, taking keyword parameters
        required_params: Parameters that must be provided
        optional_params: Parameters that may be provided
        aliases: Alternative names for this handler
        param_types: Expected Python type per parameter name
    """
    name: str
    description: str
    func: Callable[..., Any]
    required_params: Set[str] = field(default_factory=set)
    optional_params: Set[str] = field(default_factory=set)
    aliases: Set[str] = field(default_factory=set)
    param_types: Dict[str, type] = field(default_factory=dict)

    def validate(self, parameters: Dict[str, Any]) -> tuple[bool, Optional[str]]:
        """
        Validate parameters for this handler.

        Returns:
            (is_valid, error_message) tuple
        """
        for param in sorted(self.required_params):
            value = parameters.get(param)
            if value is None or (isinstance(value, str) and not value.strip()):
                return False, f"Missing required parameter: {param}"

        unexpected = set(parameters) - self.required_params - self.optional_params
        if unexpected:
            return False, f"Unexpected parameter(s): {', '.join(sorted(unexpected))}"

        for param, expected in sorted(self.param_types.items()):
            value = parameters.get(param)
            if value is None:
                continue
            # bool is a subclass of int
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                return False, f"Parameter '{param}' must be of type {expected.__name__}"

        return True, None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "required_params": sorted(self.required_params),
            "optional_params": sorted(self.optional_params),
            "aliases": sorted(self.aliases),
        }


# ---------------------------------------------------------------------------
# HANDLER REGISTRY
# ---------------------------------------------------------------------------

class HandlerRegistry:
    """Registry of invocable handlers with parameter validation."""

    def __init__(self):
        self._handlers: Dict[str, HandlerDefinition] = {}
        self._alias_map: Dict[str, str] = {}  # alias -> canonical name

    def register(self, handler: HandlerDefinition) -> None:
        """
        Register a handler.

        Raises:
            ValueError: If the name or an alias is already taken
        """
        name = handler.name.lower().strip()
        if name in self._handlers or name in self._alias_map:
            raise ValueError(f"Handler already registered: {name}")

        self._handlers[name] = handler
        for alias in handler.aliases:
            self._alias_map[alias.lower().strip()] = name
        logger.debug(f"Registered handler: {name}")

    def get_handler(self, name: str) -> Optional[HandlerDefinition]:
        """Get a handler by name or alias."""
        name = name.lower().strip()
        if name in self._handlers:
            return self._handlers[name]
        if name in self._alias_map:
            return self._handlers.get(self._alias_map[name])
        return None

    def has_handler(self, name: str) -> bool:
        return self.get_handler(name) is not None

    def list_handlers(self) -> List[HandlerDefinition]:
        return list(self._handlers.values())

    def list_handler_names(self) -> List[str]:
        return list(self._handlers.keys())

    def validate(self, name: str, parameters: Dict[str, Any]) -> tuple[bool, Optional[str]]:
        handler = self.get_handler(name)
        if not handler:
            return False, f"Unknown handler: {name}"
        return handler.validate(parameters)

    async def invoke(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """
        Validate parameters and run a handler.

        Raises:
            HandlerNotFoundError: Unknown handler name
            HandlerValidationError: Missing, unexpected or mistyped parameters
        """
        parameters = parameters or {}
        handler = self.get_handler(name)
        if not handler:
            raise HandlerNotFoundError(f"Unknown handler: {name}")

        is_valid, error = handler.validate(parameters)
        if not is_valid:
            raise HandlerValidationError(error)

        logger.info(f"Invoking handler: {handler.name}")
        result = handler.func(**parameters)
        if inspect.isawaitable(result):
            result = await result
        return result
