"""Cellar FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the cellar domain context and carries a request id in its logs.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"
#   - "production" → event_processing = "async" (handlers fire via Engine)
from cellar.domain import cellar
from cellar.utils.logging import add_context, clear_context, get_logger
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

cellar.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Cellar API",
    description="Online wine shop: catalogue, carts, promotions, flash sales and orders",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the cellar domain context and tag log lines with a request id."""
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    add_context(request_id=request_id, path=request.url.path, method=request.method)
    try:
        with cellar.domain_context():
            response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Error handlers and routers
# ---------------------------------------------------------------------------
from cellar.api import ROUTERS  # noqa: E402
from cellar.api.errors import register_error_handlers  # noqa: E402

register_error_handlers(app)

for router in ROUTERS:
    app.include_router(router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": cellar.name}})
