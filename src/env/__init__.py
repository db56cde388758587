from env.env import (
    CONFIG_DIR,
    ConfigError,
    Environment,
    PROJECT_ROOT,
    _load_dotenv,
    get_env,
    get_logging_env,
    reset_env_caches,
    validate_playlist_id,
)

__all__ = [
    "CONFIG_DIR",
    "ConfigError",
    "Environment",
    "PROJECT_ROOT",
    "_load_dotenv",
    "get_env",
    "get_logging_env",
    "reset_env_caches",
    "validate_playlist_id",
]
