from dependency_injector import containers, providers

from partner_oauth.config import Settings
from partner_oauth.providers.oauth.clerk import ClerkOAuthProvider
from partner_oauth.repositories.session_repository import build_session_repository
from partner_oauth.services.auth_service import AuthService
from partner_oauth.services.partner_api_service import PartnerAPIService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class RepositoryModule(containers.DeclarativeContainer):
    """Session storage."""

    config = providers.DependenciesContainer()

    session_repository = providers.Singleton(
        build_session_repository, settings=config.config
    )


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()
    repositories = providers.DependenciesContainer()

    clerk_provider = providers.Factory(ClerkOAuthProvider, settings=config.config)
    auth_service = providers.Factory(
        AuthService,
        provider=clerk_provider,
        session_repository=repositories.session_repository,
    )
    partner_api_service = providers.Factory(PartnerAPIService, settings=config.config)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "partner_oauth.routers.auth_router",
            "partner_oauth.routers.api_router",
            "partner_oauth.routers.health_router",
        ],
    )

    config = providers.Container(ConfigModule)
    repositories = providers.Container(RepositoryModule, config=config)
    services = providers.Container(
        ServiceModule, config=config, repositories=repositories
    )
