"""Exceptions raised by environment scopes."""

from __future__ import annotations


class TempEnvError(Exception):
    """Base exception for environment scope failures."""


class ScopeContentionError(TempEnvError):
    """Raised when a scope cannot take the process-wide token.

    Parameters
    ----------
    message : str
        Human-readable error description.
    owner_thread : int | None
        Ident of the thread holding the token, if known.
    """

    def __init__(self, message: str, owner_thread: int | None = None) -> None:
        super().__init__(message)
        self.owner_thread = owner_thread


class ScopeContentionTimeoutError(ScopeContentionError):
    """Raised when waiting for the token exceeds its timeout.

    Parameters
    ----------
    message : str
        Human-readable error description.
    timeout : float
        Timeout that was exceeded, in seconds.
    owner_thread : int | None
        Ident of the thread holding the token, if known.
    """

    def __init__(
        self, message: str, timeout: float, owner_thread: int | None = None
    ) -> None:
        super().__init__(message, owner_thread=owner_thread)
        self.timeout = timeout


class RestorationError(TempEnvError):
    """Raised when one or more variables could not be restored.

    Parameters
    ----------
    failures : dict[str, Exception]
        Variable names mapped to the error the environment API raised.
    """

    def __init__(self, failures: dict[str, Exception]) -> None:
        self.failures = dict(failures)
        details = ", ".join(
            f"{name!r} ({type(error).__name__}: {error})"
            for name, error in self.failures.items()
        )
        super().__init__(
            f"Failed to restore {len(self.failures)} environment variable(s): {details}"
        )
