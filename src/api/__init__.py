"""FastAPI application setup."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.controller import product_router
from src.config import get_config
from src.services import (
    ProductNotFoundError,
    ProductService,
    ProductValidationError,
    StorageError,
    create_product_service,
)

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    """Map service errors to HTTP responses."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ProductValidationError)
    async def product_validation_handler(request: Request, exc: ProductValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(ProductNotFoundError)
    async def not_found_handler(request: Request, exc: ProductNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.exception(f"Storage failure on {request.method} {request.url.path}: {exc}")
        else:
            logger.warning(f"Storage rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(product_service: Optional[ProductService] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        product_service: Service to serve requests with. When omitted, one is
            built from the loaded configuration at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service = product_service or create_product_service(get_config())
        await service.connect()
        app.state.product_service = service
        logger.info("Product service connected")
        try:
            yield
        finally:
            await service.close()
            logger.info("Product service closed")

    app = FastAPI(
        title="Products API",
        description="CRUD API for the products catalog",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # Include routers
    app.include_router(product_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
