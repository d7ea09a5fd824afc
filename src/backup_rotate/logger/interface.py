"""
Logger interface for backup rotation.

Every component takes a Logger in its constructor instead of reaching for
a module-level logger, so callers decide where output goes.
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract logging contract.

    Keyword arguments are structured context (target=..., artifact=...)
    rendered by the implementation.
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def get_session_id(self) -> str:
        """Identifier shared by every entry of one run."""
        pass
