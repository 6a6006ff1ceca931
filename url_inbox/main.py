import json

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from url_inbox.core.logging import setup_logging
from url_inbox.core.settings import get_settings
from url_inbox.routers import share

# Initialize
settings = get_settings()
logger = setup_logging()

# Create app
app = FastAPI(
    title=settings.app_name, version="1.0.0", description="Share intake and pending URL buffer"
)


def _serialize_validation_errors(errors: list) -> list:
    """Convert validation errors to JSON-serializable format."""
    serialized = []
    for error in errors:
        serialized_error = {
            "loc": error.get("loc"),
            "msg": str(error.get("msg", "")),
            "type": error.get("type"),
        }
        if "input" in error:
            try:
                json.dumps(error["input"])
                serialized_error["input"] = error["input"]
            except (TypeError, ValueError):
                serialized_error["input"] = str(error["input"])
        serialized.append(serialized_error)
    return serialized


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log rejected share payloads and return the standard 422 body."""
    logger.warning(
        "Validation error on %s %s: %d error(s)",
        request.method,
        request.url.path,
        len(exc.errors()),
    )
    for error in exc.errors():
        logger.warning("  - Field: %s, Error: %s, Type: %s", error["loc"], error["msg"], error["type"])

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": _serialize_validation_errors(exc.errors())},
    )


@app.on_event("startup")
async def startup_event():
    """Prepare the buffer store."""
    logger.info("Starting up...")
    if settings.store_backend == "sql":
        from url_inbox.core.db import init_db

        init_db()
    logger.info("Buffer store ready (%s)", settings.store_backend)


app.include_router(share.router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}
