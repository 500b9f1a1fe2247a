from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pos_reviews.db.session import shutdown
from pos_reviews.dependencies import DB
from pos_reviews.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from pos_reviews.logging import get_logger
from pos_reviews.middleware import RequestIDMiddleware
from pos_reviews.routers import analytics, rollup, session
from pos_reviews.schemas.error import ErrorCode, ErrorDetail, ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup before the yield, shutdown (close pooled connections) after it."""
    yield
    await shutdown()


app = FastAPI(title="POS Reviews API", lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)
app.include_router(session.router)
app.include_router(analytics.router)
app.include_router(analytics.staff_router)
app.include_router(rollup.router)


def _error_json(code: ErrorCode, message: str) -> dict[str, object]:
    """Build the standard error envelope as a dict for JSONResponse."""
    return ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump()


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_json("not_found", exc.message))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_json("validation_error", exc.message))


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Return 409; the request left no trace in the database."""
    logger.info("conflict", error=exc.message, path=request.url.path)
    return JSONResponse(status_code=409, content=_error_json("conflict", exc.message))


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Return 400 for generic domain-level violations."""
    logger.warning("domain_error", error=exc.message, path=request.url.path)
    return JSONResponse(status_code=400, content=_error_json("domain_error", exc.message))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """The store failed mid-request; the transaction has been rolled back."""
    logger.exception("storage_error", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content=_error_json("storage_error", "Storage backend failure"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the full traceback and return a generic 500; no stack trace reaches the client."""
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content=_error_json("internal_error", "Internal server error"),
    )


@app.get("/health")
async def health(db: DB) -> dict[str, str]:
    """Returns 200 only if the database answers a ping query."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
