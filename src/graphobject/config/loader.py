from __future__ import annotations

from typing import Any, Mapping

from dynaconf import Dynaconf

from graphobject.config.settings import GraphObjectConfig

DEFAULTS = {
    # Key holding the node identifier used for identity comparison
    "ID_KEY": "id",
    # Enable/disable value kind checks on set
    "VALIDATE_VALUES": True,
    # Maximum nesting depth when unwrapping to raw documents
    "MAX_DEPTH": 64,
}


def _build_settings() -> Dynaconf:
    return Dynaconf(
        envvar_prefix="GRAPHOBJECT",
        load_dotenv=True,
        settings_files=[],
    )


def load_config(overrides: Mapping[str, Any] | None = None) -> GraphObjectConfig:
    """
    Build a GraphObjectConfig from GRAPHOBJECT_* environment variables.

    Explicit overrides win over the environment, which wins over DEFAULTS.
    """
    settings = _build_settings()
    values = {key: settings.get(key, default) for key, default in DEFAULTS.items()}

    for key, value in (overrides or {}).items():
        values[key.upper()] = value

    return GraphObjectConfig(
        id_key=str(values["ID_KEY"]),
        validate_values=bool(values["VALIDATE_VALUES"]),
        max_depth=int(values["MAX_DEPTH"]),
    )
