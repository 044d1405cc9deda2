"""OrderDesk FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the OrderDesk domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay (e.g. "production" → PostgreSQL).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from orderdesk.domain import orderdesk
from orderdesk.utils.logging import clear_context, configure_logging

configure_logging()
orderdesk.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="OrderDesk API",
    description="Checkout, payment reconciliation and order lifecycle for the storefront",
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
    """Push the OrderDesk domain context for each request."""
    clear_context()
    with orderdesk.domain_context():
        return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from orderdesk.api import checkout_router, failed_order_router, order_router, payment_router  # noqa: E402
from orderdesk.api.errors import register_error_handlers  # noqa: E402

app.include_router(checkout_router)
app.include_router(payment_router)
app.include_router(order_router)
app.include_router(failed_order_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": orderdesk.name})
