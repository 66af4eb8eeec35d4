import logging

from dotenv import load_dotenv

# Load environment variables from .env BEFORE anything reads settings
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.bootstrap import bootstrap_system
from .core.config import settings
from .core.exceptions import PortalError
from .core.rate_limit import limiter, rate_limit_handler

# API routers
from .api import health
from .api.auth import main as auth_main_api
from .api.customers import main as customers_main_api
from .api.packages import main as packages_main_api
from .api.permissions import main as permissions_main_api
from .api.roles import assignments as role_assignments_api
from .api.roles import main as roles_main_api
from .api.tickets import main as tickets_main_api
from .api.users import main as users_main_api

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="E-Ticketing Portal", version="1.0.0")


# --- Database Initialization ---
@app.on_event("startup")
def on_startup():
    """Create tables and seed system roles, permissions and the admin account."""
    bootstrap_system()
    logger.info("Database tables initialized")


# --- Rate limiting ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


# ============================================================================
# --- SECURITY: CORS ---
# ============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# --- SECURITY: HTTP HEADERS ---
# ============================================================================
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


# ============================================================================
# --- EXCEPTION HANDLERS ---
# ============================================================================
def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": message},
    )


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    lines = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        lines.append(f"{field}: {error.get('msg')}")
    return error_response(400, "\n".join(lines) or "Invalid request")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(409, "The operation conflicts with existing data")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Internal server error")


# ============================================================================
# --- ROUTERS INCLUSION ---
# ============================================================================
app.include_router(health.router)
app.include_router(auth_main_api.router, tags=["Auth"])
app.include_router(customers_main_api.router, tags=["Customers"])
app.include_router(packages_main_api.router, tags=["Packages"])
app.include_router(roles_main_api.router, tags=["Roles"])
app.include_router(role_assignments_api.router, tags=["Role Assignments"])
app.include_router(permissions_main_api.router, tags=["Permissions"])
app.include_router(tickets_main_api.router, tags=["Tickets"])
app.include_router(users_main_api.router, tags=["Users"])
