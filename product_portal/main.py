from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time
from typing import Callable

from product_portal.api.error_handlers import register_exception_handlers
from product_portal.core.config import get_settings, load_env_file
from product_portal.core.logging import configure_logging, get_logger, set_correlation_id


# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG
    )

    configure_middleware(app)
    register_exception_handlers(app)
    register_routers(app)

    logger.info(
        f"{settings.PROJECT_NAME} configured",
        extra={"gateway_configured": bool(settings.apim.BASE_URL)}
    )
    return app


def configure_middleware(app: FastAPI) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round(process_time * 1000, 2)
                },
                exc_info=True
            )
            raise

        response.headers["X-Correlation-ID"] = correlation_id

        process_time = time.time() - start_time
        logger.info(
            "Request completed",
            extra={
                "request_path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2)
            }
        )
        return response


def register_routers(app: FastAPI) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    # Import routers here to avoid circular imports
    from product_portal.api.routes.health import health_router
    from product_portal.api.routes.product import router as product_router

    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(product_router)


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("product_portal.main:app", host="0.0.0.0", port=8000, reload=True)
