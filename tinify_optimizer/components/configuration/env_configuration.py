import os
from pathlib import Path
from typing import Any, TypeVar

from dotenv import dotenv_values

from tinify_optimizer.components.configuration.configuration_interface import (
    ConfigurationInterface,
)

T = TypeVar("T")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class EnvConfiguration(ConfigurationInterface):
    """
    Configuration read from ``<config_path>/<env>.env`` with the process
    environment taking precedence.
    """

    def __init__(self, env: str, config_path: str) -> None:
        self.env = env
        self.config_file = Path(config_path) / f"{env}.env"
        self._values: dict[str, str | None] = {}
        if self.config_file.is_file():
            self._values = dict(dotenv_values(self.config_file))

    def _raw(self, key: str) -> str | None:
        value = os.getenv(key)
        if value is not None and value.strip():
            return value
        value = self._values.get(key)
        if value is not None and value.strip():
            return value
        return None

    def get_configuration(
        self, key: str, value_type: type[T], default: Any = None
    ) -> T:
        raw = self._raw(key)
        if raw is None:
            if default is None:
                raise ValueError(
                    f"Configuration key {key} is not set for environment {self.env}"
                )
            return default

        raw = raw.strip()
        if value_type is bool:
            lowered = raw.lower()
            if lowered in _TRUE_VALUES:
                return True  # type: ignore[return-value]
            if lowered in _FALSE_VALUES:
                return False  # type: ignore[return-value]
            raise ValueError(f"Configuration key {key} is not a boolean: {raw}")

        try:
            return value_type(raw)  # type: ignore[call-arg]
        except (TypeError, ValueError) as e:
            raise ValueError(
                f"Configuration key {key} cannot be read as {value_type.__name__}: {raw}"
            ) from e
