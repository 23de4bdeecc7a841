from __future__ import annotations

from abc import ABC, abstractmethod


class ICredentialStore(ABC):
    """Keeps each client's raw bearer credential across restarts.

    `client_key` is the opaque session id the client presents; one credential
    is kept per key.
    """

    @abstractmethod
    def get(self, client_key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, client_key: str, token: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self, client_key: str) -> None:
        raise NotImplementedError
