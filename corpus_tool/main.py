from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from corpus_tool.api.v1 import router as api_v1_router
from corpus_tool.core.config import settings
from corpus_tool.core.exceptions import CorpusError
from corpus_tool.middleware.request_logger import RequestLoggerMiddleware
from corpus_tool.models import utcnow
from corpus_tool.services.corpus_store import CorpusStore, corpus_store, get_corpus_store

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the store connects lazily on first use
    logger.info(f"Text corpus tool starting on http://{settings.host}:{settings.port}")
    logger.info(
        f"Database: {settings.mongodb_database}.{settings.mongodb_collection}"
    )
    yield
    # Shutdown: runs on normal exit and on SIGINT/SIGTERM
    logger.info("Shutting down server...")
    await corpus_store.close()


app = FastAPI(
    title="Text Corpus Tool",
    description="Curate a text corpus: clean pasted text, preview document records and store them in MongoDB",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.add_middleware(RequestLoggerMiddleware)

# Include API v1 routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.exception_handler(CorpusError)
async def handle_corpus_error(_: Request, exc: CorpusError):
    """Validation, conflict and store errors all render as {"error": message}."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(_: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request: " + "; ".join(messages)},
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(_: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.get("/health")
async def health_check(store: CorpusStore = Depends(get_corpus_store)):
    connected = await store.ping()
    return JSONResponse(
        status_code=200 if connected else 503,
        content={
            "status": "healthy" if connected else "unhealthy",
            "database": "connected" if connected else "disconnected",
            "timestamp": utcnow().isoformat(),
        },
    )


def run():
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
