from abc import ABC, abstractmethod


class CredentialRepositoryInterface(ABC):
    @abstractmethod
    def get_token(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def save_token(self, token: str) -> None:
        raise NotImplementedError
