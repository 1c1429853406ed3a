from dependency_injector import containers, providers

from pointrally.config import Settings
from pointrally.providers.team_sync import TeamSyncClient


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class ProviderModule(containers.DeclarativeContainer):
    """Clients for external team APIs."""

    config = providers.DependenciesContainer()

    team_sync_client = providers.Singleton(
        TeamSyncClient,
        base_url=config.config.provided.TEAM_SYNC_BASE_URL,
        timeout=config.config.provided.TEAM_SYNC_TIMEOUT_SECONDS,
    )


class Container(containers.DeclarativeContainer):
    """Application container.

    요청 단위 서비스는 세션을 명시적으로 받아야 하므로 deps.py 에서 생성한다.
    """

    wiring_config = containers.WiringConfiguration(
        modules=[
            "pointrally.routers.team_router",
        ],
    )

    config = providers.Container(ConfigModule)
    clients = providers.Container(ProviderModule, config=config)
