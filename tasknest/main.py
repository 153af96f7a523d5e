import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel
from .api.v1.api import router as api_router
from .core.config import settings
from .core.logging_setup import setup_logging
from .db.session import sync_engine
from .services.live import TaskFeed
from . import models  # noqa: F401  (registers tables on SQLModel.metadata)

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create database tables on startup
def create_db_and_tables():
    SQLModel.metadata.create_all(sync_engine)

@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("%s started", settings.PROJECT_NAME)
    yield
    logger.info("%s stopped", settings.PROJECT_NAME)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Task lists, profiles and live task snapshots for the TaskNest clients",
    version="1.0.0",
    lifespan=lifespan
)

# Fan-out point for live task snapshots
app.state.task_feed = TaskFeed()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database operation failed: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database operation failed"},
    )

# Include API routers
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"message": f"{settings.PROJECT_NAME} API"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}
