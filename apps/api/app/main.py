import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from app.api.v1.oauth import router as oauth_router
from app.api.v1.router import router as v1_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIdMiddleware
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.services.error_codes import ErrorCode

configure_logging()

logger = structlog.get_logger(__name__)

app = FastAPI(title="BuildClub API")

# Starlette runs the LAST added middleware FIRST (outermost).
# - RequestId + SecurityHeaders wrap everything, including preflight and 429s
# - CORS answers preflight before the session cookie is decoded
# - Session must sit outside RateLimit and the app so request.session exists
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age_seconds,
    same_site=settings.token_cookie_samesite,
    https_only=settings.token_cookie_secure,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": "invalid request",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("storage_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": ErrorCode.INTERNAL_ERROR.value, "message": "internal error"}},
    )


@app.get("/")
def root():
    return {"name": "BuildClub API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(v1_router, prefix="/api")
app.include_router(oauth_router)
