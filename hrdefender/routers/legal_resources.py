"""
Legal Resources Router - lookup in the static OHCHR catalogue.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from hrdefender.services.legal_resources import ResourceType, get_resource, search_resources

router = APIRouter(prefix="/legal-resources", tags=["legal-resources"])


@router.get("")
async def list_legal_resources(
    q: Optional[str] = Query(default=None, description="Substring matched against name, description and keywords"),
    type: Optional[ResourceType] = Query(default=None, description="Filter by resource type"),
):
    """Search the catalogue; without a query every resource (of the type) is returned."""
    resources = search_resources(q or "", resource_type=type)
    return {
        "resources": [resource.to_dict() for resource in resources],
        "count": len(resources),
    }


@router.get("/{resource_id}")
async def get_legal_resource(resource_id: str):
    resource = get_resource(resource_id)
    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Legal resource {resource_id} not found",
        )
    return resource.to_dict()
