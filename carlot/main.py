from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .db import Base, engine
from .errors import CarlotError, DependencyError
from .api.routes import router as api_router
from .scheduler import start_scheduler, stop_scheduler
from .storage import LocalStorage
from .utils import logger
import carlot.models  # noqa: F401 ensure models are imported so tables are known

# create FastAPI instance
app = FastAPI(title="carlot")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)

if config.STORAGE_PROVIDER == "local":
    local = LocalStorage()
    app.mount("/uploads", StaticFiles(directory=local.root), name="uploads")


@app.exception_handler(CarlotError)
def carlot_error_handler(request: Request, exc: CarlotError):
    if isinstance(exc, DependencyError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(SQLAlchemyError)
def database_error_handler(request: Request, exc: SQLAlchemyError):
    # repository failures on routes that call crud directly
    logger.error("%s %s database error", request.method, request.url.path, exc_info=exc)
    return carlot_error_handler(request, DependencyError("Database request failed."))


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    start_scheduler()


@app.on_event("shutdown")
def on_shutdown():
    stop_scheduler()
