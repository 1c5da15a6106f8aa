# api/v1/__init__.py
from fastapi import APIRouter
from .component_types import router as component_types_router
from .layouts import router as layouts_router
from .render import router as render_router

router = APIRouter(prefix="/v1")
router.include_router(component_types_router)
router.include_router(layouts_router)
router.include_router(render_router)
