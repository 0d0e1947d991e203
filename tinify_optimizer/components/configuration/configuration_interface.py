from abc import ABC, abstractmethod
from typing import Any, TypeVar

T = TypeVar("T")


class ConfigurationInterface(ABC):
    @abstractmethod
    def get_configuration(
        self, key: str, value_type: type[T], default: Any = None
    ) -> T:
        """
        Look up a configuration value and cast it to ``value_type``.

        Raises:
            ValueError: If the key is missing without a default or cannot be cast
        """
        raise NotImplementedError
