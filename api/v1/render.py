# api/v1/render.py
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from typing import List
from dependencies.auth import get_session_context
from models.layout import ExportRequest, RenderRequest
from models.session import SessionContext
from models.visual import RenderedComponent
from services.live_renderer import render_layout
from services.static_export import StaticExportGenerator

router = APIRouter(tags=["render"])

@router.post("/render", response_model=List[RenderedComponent],
             summary="Render a posted layout",
             description="Shape each component of the posted layout for the interactive dashboard client; "
                         "the optional builder state marks the selected component",
             responses={
                 200: {"description": "Layout rendered successfully"},
                 422: {"description": "Validation error in request data"}
             })
async def render_posted_layout(request: RenderRequest, session: SessionContext = Depends(get_session_context)):
    return render_layout(request.layout, state=request.state)

@router.post("/export", response_class=HTMLResponse,
             summary="Export a posted layout as HTML",
             description="Generate a standalone HTML report from the posted layout and app metadata",
             responses={
                 200: {"description": "HTML report generated", "content": {"text/html": {}}},
                 422: {"description": "Validation error in request data"}
             })
async def export_posted_layout(request: ExportRequest, session: SessionContext = Depends(get_session_context)):
    html = StaticExportGenerator().generate_html(request.layout, request.app)
    return HTMLResponse(content=html)
