import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_swagger_ui_html

from membership.core.config import settings
from membership.core.errors import register_exception_handlers
from membership.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from membership.routers import auth, dashboard, families, health, transfer, users

configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="AMPA Membership API",
    version="1.0.0",
    description="Family membership registry: families, members, users, CSV import/export and reporting.",
    # Served behind a path prefix at the edge; /docs below points Swagger at the prefixed schema.
    docs_url=None,
    root_path=settings.root_path,
)


@app.get("/docs", include_in_schema=False)
def swagger_ui():
    prefix = (settings.root_path or "").rstrip("/")
    openapi_url = f"{prefix}{app.openapi_url}"
    return get_swagger_ui_html(openapi_url=openapi_url, title=f"{app.title} - Docs")


# Cookie sessions need explicit origins; "*" is not allowed with credentials.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or f"cid_{uuid.uuid4().hex[:12]}"
    bind_correlation_id(correlation_id)
    logger.info("request started", method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
        logger.info(
            "request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        response.headers["X-Correlation-ID"] = correlation_id
        return response
    finally:
        clear_context()


register_exception_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(families.router)
app.include_router(users.router)
app.include_router(transfer.router)
app.include_router(dashboard.router)
