from src.infrastructure.config.config_loader import DEFAULT_CONFIG_NAME, load_build_config

__all__ = ["DEFAULT_CONFIG_NAME", "load_build_config"]
