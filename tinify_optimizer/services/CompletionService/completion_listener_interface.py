from abc import ABC, abstractmethod

from tinify_optimizer.entities.optimization import CompletionEvent


class CompletionListenerInterface(ABC):
    DEFAULT_TIMEOUT_MS: int = 60_000

    @abstractmethod
    async def wait_for_completion(
        self, job_id: str, timeout_ms: int = DEFAULT_TIMEOUT_MS
    ) -> CompletionEvent:
        """
        Wait for the job's terminal notification.

        Returns:
            The completion event when the job finished successfully

        Raises:
            ProcessingFailedError: the job failed, expired or the channel broke
            ProcessingTimeoutError: no terminal notification within ``timeout_ms``
        """
        raise NotImplementedError
