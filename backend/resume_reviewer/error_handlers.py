import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from resume_reviewer.errors import RateLimited, UnexpectedError

logger = logging.getLogger(__name__)


def attach_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RateLimitExceeded)
    async def _rate_limited(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"status": False, "kind": RateLimited.kind, "message": f"Rate limit exceeded: {exc.detail}"},
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"status": False, "kind": UnexpectedError.kind, "message": "Internal Server Error"},
        )
