from abc import ABC, abstractmethod

from tinify_optimizer.entities.optimization import (
    OptimizationResult,
    OptimizeImageParams,
)


class OptimizeServiceInterface(ABC):
    @abstractmethod
    async def optimize_image(self, params: OptimizeImageParams) -> OptimizationResult:
        """Run stage, submit, wait, retrieve and save for a single input."""
        raise NotImplementedError
