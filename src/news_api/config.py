"""Configuration loader for news-api."""

from dataclasses import dataclass, field

from dotenv import load_dotenv

from build_news_feed.config import (
    CONFIG_ENV_VAR,
    PipelineConfig,
    pipeline_config_from_dict,
)
from common.config import ConfigSingleton, find_config_path, get_section, load_yaml

load_dotenv()


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class APIConfig:
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(config_name: str | None = None) -> APIConfig:
    """Load configuration from YAML file.

    Args:
        config_name: Name of config file (without .yaml extension);
            defaults to $NEWS_MAP_CONFIG, then "prod"

    Returns:
        APIConfig instance
    """
    path = find_config_path(config_name, env_var=CONFIG_ENV_VAR)
    raw = load_yaml(path)

    server_raw = get_section(raw, "server")
    server_config = ServerConfig(
        host=server_raw.get("host", "0.0.0.0"),
        port=int(server_raw.get("port", 8000)),
    )

    return APIConfig(
        pipeline=pipeline_config_from_dict(raw),
        server=server_config,
    )


_manager = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
