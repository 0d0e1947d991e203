import os
from pathlib import Path
from threading import Lock
from typing import Any, TypeVar, cast

import httpx
from dotenv import load_dotenv

from tinify_optimizer.components.configuration.configuration_interface import (
    ConfigurationInterface,
)
from tinify_optimizer.components.configuration.env_configuration import (
    EnvConfiguration,
)
from tinify_optimizer.components.logger.logger import Logger
from tinify_optimizer.components.logger.logger_interface import LoggerInterface


load_dotenv()

T = TypeVar("T")


class ComponentsMeta(type):
    _instances: dict[tuple[type, str], "Components"] = {}
    _lock: Lock = Lock()

    def __call__(cls, *args, **kwargs):
        env = args[0] if args else kwargs.get("env")
        if env is None:
            raise ValueError("Environment must be provided")

        env_key = str(env)
        key = (cls, env_key)
        with cls._lock:
            if key not in cls._instances:
                instance = super().__call__(*args, **kwargs)
                cls._instances[key] = instance
        return cls._instances[key]

    def forget(cls, env: str) -> None:
        with cls._lock:
            cls._instances.pop((cls, env), None)


class Components(metaclass=ComponentsMeta):
    def __init__(self, env: str, config_path: str) -> None:
        self.__env: str = env
        root_dir: str = str(Path(__file__).resolve().parents[2])
        self.__config_path: str = os.path.join(root_dir, config_path)
        self.__components: dict[type[Any], Any] = self.__bootstrap_components()

    def __bootstrap_components(self) -> dict[type[Any], Any]:
        if self.__env in {"development", "staging", "production"}:
            return self.__get_dev_components()

        raise ValueError(f"Invalid environment: {self.__env}")

    def __get_dev_components(self) -> dict[type[Any], Any]:
        configuration: ConfigurationInterface = EnvConfiguration(
            self.__env, self.__config_path
        )

        logger: LoggerInterface = Logger(
            log_format=configuration.get_configuration("LOG_FORMAT", str, default=""),
            log_level=configuration.get_configuration("LOG_LEVEL", str, default="INFO"),
        )
        _logger_instance = logger.get_logger("Components")

        http_timeout: float = configuration.get_configuration(
            "HTTP_TIMEOUT_SECONDS", float, default=30.0
        )
        http_client = httpx.AsyncClient(timeout=http_timeout)
        _logger_instance.debug(
            "HTTP client created with %s s timeout for env %s",
            http_timeout,
            self.__env,
        )

        components: dict[type[Any], Any] = {
            ConfigurationInterface: configuration,
            LoggerInterface: logger,
            httpx.AsyncClient: http_client,
        }

        return components

    def get_component(self, component_name: type[T]) -> T:
        if component_name not in self.__components:
            raise ValueError(f"Component {component_name} not found")

        return cast(T, self.__components[component_name])

    def get_config_path(self) -> str:
        return self.__config_path

    async def aclose(self) -> None:
        """Close the shared HTTP client and drop this environment's instance."""
        await self.get_component(httpx.AsyncClient).aclose()
        type(self).forget(self.__env)
