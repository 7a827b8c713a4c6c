from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import health, polymarket
from .api.errors import (
    ParameterError,
    parameter_error_handler,
    request_validation_error_handler,
)
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .providers.polymarket import (
    get_gamma_client,
    get_leaderboard_client,
    get_subgraph_client,
)

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release pooled upstream connections
    for client in (get_gamma_client(), get_leaderboard_client(), get_subgraph_client()):
        await client.close()


# Create FastAPI app
app = FastAPI(
    title="Copy Trading Dashboard API",
    description="Read-only Polymarket proxy for the copy-trading dashboard",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(ParameterError, parameter_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(polymarket.router)


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Copy Trading Dashboard API",
        "version": "0.1.0",
        "description": "Read-only Polymarket proxy for the copy-trading dashboard",
        "endpoints": ["/markets", "/top-traders", "/user-performance"],
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
