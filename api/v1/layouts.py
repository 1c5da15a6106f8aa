# api/v1/layouts.py
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from typing import List
from dependencies.auth import get_session_context
from models.layout import (
    AddComponentRequest,
    BindQueryRequest,
    LayoutResponse,
    LayoutSaveRequest,
)
from models.session import SessionContext
from models.visual import RenderedComponent
from services.layouts import LayoutService, add_component
from services.live_renderer import render_layout
from services.static_export import StaticExportGenerator
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/apps", tags=["layouts"])

#
# Layout Document Endpoints
#
@router.get("/{app_id}/layout", response_model=LayoutResponse,
            summary="Load an app layout",
            description="Fetch the stored layout and re-execute every bound query so component data is fresh",
            responses={
                200: {"description": "Layout loaded successfully"},
                401: {"description": "Missing or invalid authentication token"},
                502: {"description": "Backend error while fetching the layout"},
                504: {"description": "Backend timed out"}
            })
async def get_layout(app_id: str, session: SessionContext = Depends(get_session_context)):
    service = LayoutService(session)
    return LayoutResponse(layout=await service.load_layout(app_id))

@router.put("/{app_id}/layout", response_model=LayoutResponse,
            summary="Save an app layout",
            description="Persist the layout in order; query results are stripped before saving",
            responses={
                200: {"description": "Layout saved successfully"},
                401: {"description": "Missing or invalid authentication token"},
                422: {"description": "Validation error in request data"},
                502: {"description": "Backend error while saving the layout"}
            })
async def save_layout(app_id: str, request: LayoutSaveRequest,
                      session: SessionContext = Depends(get_session_context)):
    service = LayoutService(session)
    saved = await service.save_layout(app_id, request.layout)
    return LayoutResponse(layout=saved)

@router.post("/{app_id}/layout/components", response_model=LayoutResponse,
             summary="Add a component",
             description="Append a fresh, unbound component of the given type to the posted layout",
             responses={
                 200: {"description": "Component added"},
                 422: {"description": "Unknown component type"}
             })
async def add_layout_component(app_id: str, request: AddComponentRequest,
                               session: SessionContext = Depends(get_session_context)):
    logger.info(f"Adding {request.type.value} component to layout of app {app_id}")
    return LayoutResponse(layout=add_component(request.layout, request.type))

@router.post("/{app_id}/layout/bind", response_model=LayoutResponse,
             summary="Bind a query to a component",
             description="Execute the query and attach its id, name and rows to one component of the posted layout",
             responses={
                 200: {"description": "Query bound successfully"},
                 404: {"description": "Component not found in layout"},
                 502: {"description": "Query execution failed"},
                 504: {"description": "Query execution timed out"}
             })
async def bind_query(app_id: str, request: BindQueryRequest,
                     session: SessionContext = Depends(get_session_context)):
    service = LayoutService(session)
    try:
        layout = await service.bind_query(app_id, request.layout, request.componentId, request.queryId)
    except HTTPException as e:
        logger.error(f"Error binding query {request.queryId} in app {app_id}: {e.detail}")
        raise e
    return LayoutResponse(layout=layout)

#
# Rendering of stored layouts
#
@router.get("/{app_id}/render", response_model=List[RenderedComponent],
            summary="Render an app layout",
            description="Load the stored layout with fresh data and return the live render payload per component",
            responses={
                200: {"description": "Layout rendered successfully"},
                401: {"description": "Missing or invalid authentication token"},
                502: {"description": "Backend error while fetching the layout"}
            })
async def render_app_layout(app_id: str, session: SessionContext = Depends(get_session_context)):
    service = LayoutService(session)
    return render_layout(await service.load_layout(app_id))

@router.get("/{app_id}/export", response_class=HTMLResponse,
            summary="Export an app layout as HTML",
            description="Load the stored layout with fresh data and return a standalone HTML report",
            responses={
                200: {"description": "HTML report generated", "content": {"text/html": {}}},
                401: {"description": "Missing or invalid authentication token"},
                502: {"description": "Backend error while fetching the app or layout"}
            })
async def export_app_layout(app_id: str, session: SessionContext = Depends(get_session_context)):
    service = LayoutService(session)
    app_meta = await service.client.get_app(app_id)
    components = await service.load_layout(app_id)

    html = StaticExportGenerator().generate_html(components, app_meta)
    filename = f"{(app_meta.name or 'dashboard').replace(' ', '-').lower()}-dashboard.html"
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
