from .config import (
    AppConfig,
    EventChannelConfig,
    load_app_config,
    load_env_config,
)

__all__ = [
    "AppConfig",
    "EventChannelConfig",
    "load_app_config",
    "load_env_config",
]
