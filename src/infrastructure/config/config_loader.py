import json
import re
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from src.application.dto.build_config import BuildConfig
from src.domain.errors import ConfigError

DEFAULT_CONFIG_NAME = "keel.json"

_VARIABLE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _substitute(value: Any, variables: dict[str, str], path: str) -> Any:
    """Replace ``${name}`` references in every string of a JSON tree."""
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in variables:
                raise ConfigError(path, f"undefined variable '${{{name}}}'")
            return variables[name]

        return _VARIABLE.sub(replace, value)
    if isinstance(value, list):
        return [_substitute(v, variables, path) for v in value]
    if isinstance(value, dict):
        return {k: _substitute(v, variables, path) for k, v in value.items()}
    return value


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item.get("loc", ()))
        msg = item.get("msg", "")
        # Clean up Pydantic message format
        if msg.startswith("Value error, "):
            msg = msg[13:]
        lines.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(lines)


def load_build_config(path: Path) -> BuildConfig:
    """Load and validate the build configuration.

    Raises:
        ConfigError: the file is missing, not JSON, or fails validation.
    """
    if not path.is_file():
        raise ConfigError(str(path), "file not found")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(str(path), f"invalid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(str(path), "top level must be an object")

    variables = raw.get("variables", {})
    if not isinstance(variables, dict) or not all(
        isinstance(v, str) for v in variables.values()
    ):
        raise ConfigError(str(path), "variables must map names to strings")

    body = {k: v for k, v in raw.items() if k != "variables"}
    data = _substitute(body, variables, str(path))
    data["variables"] = variables

    try:
        config = BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(path), _format_validation_error(e)) from None

    logger.debug(
        "Loaded {}: {} repositories, {} dependencies, {} tasks",
        path,
        len(config.repositories),
        len(config.dependencies),
        len(config.tasks),
    )
    return config
