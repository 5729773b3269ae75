"""
userdir application package
"""

from typing import Optional, Type

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import HTTPException

from userdir.client import Transport
from userdir.config import Config
from userdir.models import ErrorResponse
from userdir.services import build_services
from userdir.routes.root import router as root_router
from userdir.routes.users import router as users_router
from userdir.routes.search import router as search_router


def create_app(config: Type[Config] = Config, transport: Optional[Transport] = None) -> FastAPI:
    """Create and configure FastAPI application"""

    # Initialize FastAPI app
    app = FastAPI(
        title=config.TITLE,
        description=config.DESCRIPTION,
        version=config.VERSION,
        docs_url=config.DOCS_URL,
        redoc_url=config.REDOC_URL
    )

    # Shared cache, tracker and directory client for the app's lifetime
    app.state.services = build_services(config, transport)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOW_ORIGINS,
        allow_credentials=config.ALLOW_CREDENTIALS,
        allow_methods=config.ALLOW_METHODS,
        allow_headers=config.ALLOW_HEADERS,
    )

    # Include routers
    app.include_router(root_router)
    app.include_router(users_router)
    app.include_router(search_router)

    # Exception handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        """Custom HTTP exception handler"""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                detail=exc.detail,
                error_type="HTTPException"
            ).model_dump()
        )

    return app
