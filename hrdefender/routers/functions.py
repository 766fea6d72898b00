"""
Functions Router - list and invoke registered handlers.

Only handlers registered at start-up can be invoked; there is no endpoint
that registers new ones.
"""

import logging

from fastapi import APIRouter, Depends

from hrdefender.ai.handlers import HandlerRegistry
from hrdefender.deps import get_handler_registry
from hrdefender.routers.errors import to_http_exception
from hrdefender.schemas.functions import (
    HandlerInfo,
    HandlerListResponse,
    InvokeHandlerRequest,
    InvokeHandlerResponse,
)

logger = logging.getLogger("hrdefender.routers.functions")

router = APIRouter(prefix="/functions", tags=["functions"])


@router.get("", response_model=HandlerListResponse)
async def list_functions(registry: HandlerRegistry = Depends(get_handler_registry)):
    handlers = [HandlerInfo(**handler.to_dict()) for handler in registry.list_handlers()]
    return HandlerListResponse(handlers=handlers, count=len(handlers))


@router.post("/{name}/invoke", response_model=InvokeHandlerResponse)
async def invoke_function(
    name: str,
    request: InvokeHandlerRequest,
    registry: HandlerRegistry = Depends(get_handler_registry),
):
    """
    Invoke a handler by name or alias.

    Unknown handlers answer 404; missing or unexpected parameters answer 400.
    """
    try:
        result = await registry.invoke(name, request.parameters)
    except Exception as e:
        raise to_http_exception(e, f"invoke handler {name}") from e

    return InvokeHandlerResponse(handler=registry.get_handler(name).name, result=result)
