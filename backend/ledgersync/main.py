"""
IoT Ledger Sync - Main Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledgersync.config import settings
from ledgersync.errors import (
    ConfirmationTimeout, DeviceNotFound, InvalidInput, LedgerError, NetworkMismatch,
    NotInitialized, ProviderUnavailable, RpcError, WriteRejected,
)
from ledgersync.routers import (
    dashboard, devices, records, session as session_router, thresholds, transactions,
)
from ledgersync.schemas.ledger import NetworkDescriptor
from ledgersync.services.gateway import LedgerGateway
from ledgersync.services.rpc_client import JsonRpcClient
from ledgersync.services.session import LedgerSession
from ledgersync.services.signing import build_provider

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_session() -> LedgerSession:
    """Wire endpoint, signing provider and gateway from settings."""
    rpc = JsonRpcClient(
        settings.RPC_URL,
        timeout=settings.RPC_TIMEOUT_SECONDS,
        verify=settings.RPC_SSL_VERIFY,
    )
    gateway = LedgerGateway(
        provider=build_provider(rpc),
        rpc=rpc,
        contract_address=settings.CONTRACT_ADDRESS,
        network=NetworkDescriptor.from_settings(settings),
        receipt_timeout=settings.RECEIPT_TIMEOUT_SECONDS,
        poll_interval=settings.RECEIPT_POLL_INTERVAL_SECONDS,
    )
    return LedgerSession(gateway, scan_concurrency=settings.SCAN_CONCURRENCY)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    ledger_session = build_session()
    app.state.ledger_session = ledger_session

    if settings.AUTO_CONNECT:
        try:
            # Resume only an identity the provider already authorized; never prompt
            await ledger_session.connect(prompt=False)
        except Exception as e:
            # Not fatal for the API: POST /api/session/connect retries explicitly
            logger.warning("No previous connection resumed: %s", e)

    yield

    # Shutdown
    await ledger_session.close()
    logger.info(f"{settings.APP_NAME} shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)


# Security headers middleware
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ── Error mapping ───────────────────────────────────────────────────────────

ERROR_STATUS = [
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (DeviceNotFound, status.HTTP_404_NOT_FOUND),
    (NotInitialized, status.HTTP_409_CONFLICT),
    (NetworkMismatch, status.HTTP_502_BAD_GATEWAY),
    (WriteRejected, status.HTTP_502_BAD_GATEWAY),
    (RpcError, status.HTTP_502_BAD_GATEWAY),
    (ProviderUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ConfirmationTimeout, status.HTTP_504_GATEWAY_TIMEOUT),
]


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type, mapped in ERROR_STATUS:
        if isinstance(exc, exc_type):
            code = mapped
            break
    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, InvalidInput) and exc.errors:
        content["errors"] = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors]
    if isinstance(exc, WriteRejected) and exc.tx_hash:
        content["tx_hash"] = exc.tx_hash
    return JSONResponse(status_code=code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Same body as InvalidInput raised by the services
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "; ".join(str(e.get("msg")) for e in errors),
            "error": InvalidInput.__name__,
            "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors],
        },
    )


@app.exception_handler(httpx.HTTPError)
async def endpoint_error_handler(request: Request, exc: httpx.HTTPError):
    logger.warning("Ledger endpoint error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"Ledger endpoint unreachable: {exc}", "error": "EndpointError"},
    )


# Routers
app.include_router(session_router.router)
app.include_router(dashboard.router)
app.include_router(devices.router)
app.include_router(records.router)
app.include_router(thresholds.router)
app.include_router(transactions.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": settings.APP_VERSION}
