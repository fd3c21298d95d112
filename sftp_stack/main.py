from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from sftp_stack.routes.plan import router as plan_router
from sftp_stack.services.errors import (
    ConfigError,
    ExternalLookupError,
    NetworkError,
    PlanningError,
    UserConfigError,
)


def _ensure_logging() -> None:
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(logging.INFO)
        for handler in root.handlers:
            handler.setFormatter(formatter)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_logging()
    yield


app = FastAPI(lifespan=lifespan)

app.include_router(plan_router)

_STATUS_BY_ERROR: list[tuple[type[PlanningError], int]] = [
    (ConfigError, status.HTTP_400_BAD_REQUEST),
    (UserConfigError, status.HTTP_400_BAD_REQUEST),
    (NetworkError, status.HTTP_409_CONFLICT),
    (ExternalLookupError, status.HTTP_502_BAD_GATEWAY),
]


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError) -> JSONResponse:
    """Map planning failures to a response carrying the specific message.

    Configuration problems are the caller's to fix (400), an unusable network is
    a conflict with the target account (409), and failed AWS lookups as 502 Bad Gateway.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/")
async def root():
    return {"message": "SFTP stack planner is running."}
