"""Main FastAPI application"""
import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

# --- Add slowapi imports ---
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from routes import router as expenses_router
from services.expenses_service import ExpenseGateway
from utils.config import get_settings
from utils.error_handlers import register_error_handlers

settings = get_settings()

# --- Logging with Rich ---
# One handler on the root logger; uvicorn's loggers propagate to it.
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(name)s - %(message)s"},
    },
    "handlers": {
        "rich": {
            "class": "rich.logging.RichHandler",
            "formatter": "default",
            "rich_tracebacks": True,
            "show_path": False,
            "log_time_format": "%Y-%m-%d %H:%M:%S",
        },
    },
    "loggers": {
        "uvicorn": {"level": "INFO"},
    },
    "root": {"handlers": ["rich"], "level": settings.log_level},
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to the Expense Tracker API"
BODY_TOO_LARGE = {"message": "Request body too large"}

if not settings.mongodb_uri:
    logger.error("MONGODB_URI environment variable not set! Falling back to the driver's default host.")

# Application state to hold the database client and gateway
app_state = {}

# --- Rate Limiter Setup ---
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)


# --- Middleware for Request Body Size Limit ---
class LimitBodySizeMiddleware:
    """
    Rejects request bodies over `max_body_size` bytes with 413.

    Requests declaring Content-Length are judged by the header. Bodies without
    one (chunked) are read up to the limit, then replayed to the app.
    """

    def __init__(self, app: ASGIApp, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length_header = Headers(scope=scope).get("content-length")
        if content_length_header is not None:
            try:
                content_length = int(content_length_header)
            except ValueError:
                logger.warning("Request rejected: Invalid Content-Length header.")
                await JSONResponse({"message": "Invalid Content-Length header."}, status_code=400)(scope, receive, send)
                return
            if content_length > self.max_body_size:
                logger.warning(f"Request rejected: body size {content_length} exceeds limit {self.max_body_size}.")
                await JSONResponse(BODY_TOO_LARGE, status_code=413)(scope, receive, send)
                return
            await self.app(scope, receive, send)
            return

        chunks = []
        received = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_body_size:
                logger.warning(f"Request rejected: streamed body exceeds limit {self.max_body_size}.")
                await JSONResponse(BODY_TOO_LARGE, status_code=413)(scope, receive, send)
                return
            chunks.append(chunk)
            if not message.get("more_body", False):
                break

        body = b"".join(chunks)
        replayed = False

        async def replay_receive():
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Connect to MongoDB once for the process lifetime
    logger.info(f"Connecting to MongoDB database '{settings.db_name}'...")
    try:
        app_state["db_client"] = AsyncIOMotorClient(settings.mongodb_uri, tz_aware=True)
        db = app_state["db_client"][settings.db_name]
        await app_state["db_client"].admin.command("ping")
        logger.info("MongoDB ping successful.")
        app_state["expense_gateway"] = ExpenseGateway(db.get_collection(settings.collection_name))
        logger.info(f"Using collection '{settings.collection_name}' in database '{settings.db_name}'.")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        if app_state.get("db_client"):
            app_state["db_client"].close()
        app_state["db_client"] = None
        app_state["expense_gateway"] = None

    yield  # Application runs here

    # Shutdown: Close MongoDB connection
    if app_state.get("db_client"):
        logger.info("Closing MongoDB connection...")
        app_state["db_client"].close()
        logger.info("MongoDB connection closed.")
    app_state.clear()


app = FastAPI(
    title="Expense Tracker API",
    description="API for creating, listing, updating and deleting personal expenses.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- Rate Limiter State and Handler ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

# --- Middleware (Order Matters) ---
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LimitBodySizeMiddleware, max_body_size=settings.max_body_size)

app.include_router(expenses_router, tags=["expenses"])


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return WELCOME_MESSAGE


# Make app state accessible via middleware
@app.middleware("http")
async def add_app_state_to_request(request: Request, call_next):
    """Adds the expense gateway to the request state."""
    request.state.expense_gateway = app_state.get("expense_gateway")
    return await call_next(request)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        log_config=None,  # keep the Rich logging configured above
    )
