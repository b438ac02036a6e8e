import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse

from nextplay import __version__
from nextplay.db_init import ensure_indexes
from nextplay.errors import AppError
from nextplay.middleware.audit_middleware import AuditMiddleware
from nextplay.routes import admin, auth, children, injuries, reminders, upload
from nextplay.storage import ensure_buckets, storage_startup
from nextplay.utils.logger import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    ensure_indexes()

    # Photo storage is optional for everything but uploads
    try:
        storage_startup()
        ensure_buckets()
    except Exception as e:
        logger.warning("Bucket init skipped: %s", e)

    yield


app = FastAPI(title="Next Play Recovery", version=__version__, lifespan=lifespan)

app.add_middleware(AuditMiddleware)

# Routers
app.include_router(auth.router)
app.include_router(children.router)
app.include_router(injuries.router)
app.include_router(admin.router)
app.include_router(upload.router)
app.include_router(reminders.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    # read back by AuditMiddleware
    request.state.error_detail = exc.detail
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.get("/health")
def health():
    return {"status": "ok"}
