import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .database import DATABASE_URL, STORE_TIMEOUT_SECONDS, init_db, make_session_factory
from .exceptions import NotFoundError, StoreUnavailable, ValidationError
from .routes.ideas import router as ideas_router
from .routes.kb import router as kb_router
from .routes.portfolios import router as portfolios_router
from .routes.studio import router as studio_router
from .services.record_store import RecordStore


# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    session_factory = make_session_factory(DATABASE_URL)
    init_db(session_factory)
    app.state.store = RecordStore(session_factory, timeout=STORE_TIMEOUT_SECONDS)

    print("Starting Product Flow")
    print(f"   Database:      {DATABASE_URL}")
    print(f"   Store timeout: {STORE_TIMEOUT_SECONDS}s")
    print(f"   Session key:   {' Configured' if os.getenv('SESSION_SECRET') else ' Not set (using dev secret)'}")

    yield

    print("Shutting down Product Flow")


app = FastAPI(
    title="Product Flow",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(studio_router)
app.include_router(portfolios_router)
app.include_router(ideas_router)
app.include_router(kb_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Product Flow",
        "version": "0.1.0",
        "description": "Idea backlog and knowledge base for product portfolios",
        "docs": "/docs",
        "endpoints": {
            "login": "POST /studio/login - Start a studio session",
            "portfolios": "GET /portfolios - List portfolios",
            "ideas": "GET /{portfolio}/{product}/ideas?sort=&filter= - Idea list",
            "funnel": "GET /{portfolio}/{product}/ideas/funnel - Ideas by validation status",
            "kb": "GET /{portfolio}/{product}/kb - Knowledge base",
            "health": "GET /health - Service health check"
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "product-flow",
        "version": "0.1.0"
    }


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Client-correctable input: report every failing field together."""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "Validation failed",
            "fields": exc.errors,
        }
    )


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": str(exc)}
    )


@app.exception_handler(StoreUnavailable)
async def store_exception_handler(request: Request, exc: StoreUnavailable):
    logger.warning("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "error": "Store unavailable",
            "detail": str(exc),
            "retryable": True,
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG", "false").lower() == "true" else "An unexpected error occurred"
        }
    )


def run():
    import uvicorn

    uvicorn.run(
        "product_flow.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )


if __name__ == "__main__":
    run()
