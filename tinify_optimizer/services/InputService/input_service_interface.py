from abc import ABC, abstractmethod

from tinify_optimizer.entities.optimization import InputPayload


class InputServiceInterface(ABC):
    @abstractmethod
    async def resolve_input(self, source: str) -> InputPayload:
        """Read a local file or fetch a remote URL into memory."""
        raise NotImplementedError
