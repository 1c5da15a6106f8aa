# /main.py
from fastapi import FastAPI, status, Request
from fastapi.responses import RedirectResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_swagger_ui_html, get_redoc_html
from fastapi.openapi.utils import get_openapi
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from api.v1 import router as v1_router
import config
import logging

# Custom OpenAPI metadata
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="DashForge Layout API",
        version="0.1.0",
        description="Layout documents, live rendering and static HTML export for DashForge dashboards",
        routes=app.routes,
    )

    app.openapi_schema = openapi_schema
    return app.openapi_schema

# Initialize FastAPI with metadata
app = FastAPI(
    title="DashForge Layout API",
    version="0.1.0",
    description="Layout documents, live rendering and static HTML export for DashForge dashboards",
    docs_url=None,
    redoc_url=None
)

# Set custom OpenAPI schema function
app.openapi = custom_openapi

# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"]
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)
logger.info(f"Starting DashForge Layout API (backend: {config.BACKEND_API_URL})")

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}),
    )

# Root endpoint
@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/api/redoc")

# OpenAPI Schema JSON endpoint
@app.get("/api/openapi.json", include_in_schema=False)
async def get_openapi_json():
    return app.openapi()

# Custom docs endpoints
@app.get("/api/docs", include_in_schema=False)
async def custom_swagger_ui_html():
    return get_swagger_ui_html(
        openapi_url="/api/openapi.json",
        title="DashForge Layout API Documentation",
        swagger_js_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui-bundle.js",
        swagger_css_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui.css",
    )

@app.get("/api/redoc", include_in_schema=False)
async def redoc_html():
    return get_redoc_html(
        openapi_url="/api/openapi.json",
        title="DashForge Layout API Documentation - ReDoc",
        redoc_js_url="https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js",
    )

app.include_router(v1_router, prefix="/api")
