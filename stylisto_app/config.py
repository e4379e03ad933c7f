"""Configuration helpers for the Stylisto outfit service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_TRYON_URL = "http://localhost:5000"
DEFAULT_TRYON_TIMEOUT_SECONDS = 60.0


def _as_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class StylistoConfig:
    """Configuration values for the Stylisto app.

    Values come from the environment first and then from an optional
    environment YAML file, so secrets such as the weather API key can be
    injected at runtime without touching checked-in config.
    """

    tryon_api_url: str = DEFAULT_TRYON_URL
    tryon_timeout_seconds: float = DEFAULT_TRYON_TIMEOUT_SECONDS
    tryon_mock_fallback: bool = False
    database_path: str = "data/stylisto.db"
    weather_api_key: Optional[str] = None
    default_location: Optional[str] = None
    max_results: int = 5
    min_score: float = 0.1
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "StylistoConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default. ``APP_CONFIG_PATH`` points at an explicit file instead.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STYLISTO_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        tryon_api_url = get_value("tryon_api_url", DEFAULT_TRYON_URL)
        tryon_timeout = get_value("tryon_timeout_seconds")
        max_results = get_value("max_results")
        min_score = get_value("min_score")

        return cls(
            tryon_api_url=str(tryon_api_url or DEFAULT_TRYON_URL).rstrip("/"),
            tryon_timeout_seconds=float(tryon_timeout) if tryon_timeout else DEFAULT_TRYON_TIMEOUT_SECONDS,
            tryon_mock_fallback=_as_bool(get_value("tryon_mock_fallback")),
            database_path=str(get_value("database_path", "data/stylisto.db")),
            weather_api_key=get_value("openweather_api_key"),
            default_location=get_value("default_location"),
            max_results=int(max_results) if max_results else 5,
            min_score=float(min_score) if min_score else 0.1,
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a flat ``key: value`` YAML file."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
