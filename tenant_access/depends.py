"""
Service wiring.

The process entry point builds one ServiceContainer (engine, session
factory, identity provider, clock, settings) and stores it on the FastAPI
app. Request-scoped objects are derived from it through the dependencies
below; nothing here is a module-level client.
"""

from dataclasses import dataclass, field

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_access.adapter.services.identity_provider import SqlIdentityProvider
from tenant_access.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from tenant_access.app.services.clock import Clock, SystemClock
from tenant_access.app.services.identity_provider import IdentityInfo, IIdentityProvider
from tenant_access.app.services.settings import InvitationSettings

security = HTTPBearer()


@dataclass
class ServiceContainer:
    engine: AsyncEngine
    session_factory: sessionmaker
    identity_provider: IIdentityProvider
    settings: InvitationSettings
    clock: Clock = field(default_factory=SystemClock)


def build_container(config, engine: AsyncEngine = None) -> ServiceContainer:
    engine = engine or create_async_engine(config.DB_URI, echo=False, future=True)
    session_factory = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    identity_provider = SqlIdentityProvider(
        session_factory,
        jwt_secret=config.JWT_SECRET,
        access_token_expire_minutes=int(config.ACCESS_TOKEN_EXPIRE_MINUTES),
        bcrypt_rounds=int(config.BCRYPT_ROUNDS),
    )
    return ServiceContainer(
        engine=engine,
        session_factory=session_factory,
        identity_provider=identity_provider,
        settings=InvitationSettings.from_config(config),
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_unit_of_work(container: ServiceContainer = Depends(get_container)):
    async with container.session_factory() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_identity_provider(
    container: ServiceContainer = Depends(get_container),
) -> IIdentityProvider:
    return container.identity_provider


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    identity_provider: IIdentityProvider = Depends(get_identity_provider),
) -> IdentityInfo:
    """
    Dependency to resolve the caller behind the Bearer token.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    caller = await identity_provider.current_caller(credentials.credentials)

    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return caller
