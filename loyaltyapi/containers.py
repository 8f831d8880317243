from dependency_injector import containers, providers

from loyaltyapi.config import get_settings
from loyaltyapi.services.telegram_service import TelegramNotifier


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class ServiceModule(containers.DeclarativeContainer):
    """Process-wide service singletons."""

    config = providers.DependenciesContainer()

    telegram_notifier = providers.Singleton(TelegramNotifier, settings=config.config)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "loyaltyapi.routers.events_router",
            "loyaltyapi.routers.catalog_router",
            "loyaltyapi.routers.codes_router",
            "loyaltyapi.routers.telegram_router",
        ],
    )

    config = providers.Container(ConfigModule)
    services = providers.Container(ServiceModule, config=config)
