"""
Pydantic schemas for the /functions handler-registry endpoints.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class HandlerInfo(BaseModel):
    name: str
    description: str
    required_params: List[str]
    optional_params: List[str]
    aliases: List[str]


class HandlerListResponse(BaseModel):
    handlers: List[HandlerInfo]
    count: int


class InvokeHandlerRequest(BaseModel):
    """
    Request for POST /functions/{name}/invoke.

    Example:
    {
        "parameters": {"text": "The hearing was postponed again."}
    }
    """
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Keyword parameters for the handler")


class InvokeHandlerResponse(BaseModel):
    success: bool = True
    handler: str
    result: Any
