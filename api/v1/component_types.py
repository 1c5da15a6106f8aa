# api/v1/component_types.py
from fastapi import APIRouter
from typing import List
from models.visual import ComponentTypeInfo
from services.component_registry import catalog

router = APIRouter(prefix="/component-types", tags=["component-types"])

@router.get("", response_model=List[ComponentTypeInfo],
            summary="List component types",
            description="Catalogue of every registered component type in palette order",
            responses={
                200: {"description": "Component types retrieved successfully"}
            })
async def list_component_types():
    return catalog()
