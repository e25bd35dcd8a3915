from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel

from tenant_access.depends import ServiceContainer, build_container

from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    # The code is kept: PROFILE_PROVISIONING_FAILED tells the client to retry
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.error(f"Server error: {exc.base_error.code} {exc.base_error.details}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(ApplicationConfig, container: ServiceContainer = None) -> FastAPI:
    container = container or build_container(ApplicationConfig)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(ApplicationConfig, "CREATE_TABLES", False):
            async with container.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        yield
        await container.engine.dispose()

    app = FastAPI(title="Tenant Access API", version="0.1.0", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from tenant_access.api.routes import auth, business, health_check, invitation

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(business.router, tags=["Business"])
    app.include_router(invitation.router, tags=["Invitations"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
