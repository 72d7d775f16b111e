"""Environment scope guard with process-wide exclusivity."""

from __future__ import annotations

import itertools
import logging
import math
import os
import threading
import types
from collections import deque
from collections.abc import MutableMapping

from temp_env_vars.config import get_settings
from temp_env_vars.constants import FROM_SETTINGS, Default
from temp_env_vars.exceptions import (
    ScopeContentionError,
    ScopeContentionTimeoutError,
)
from temp_env_vars.snapshot import EnvChanges, EnvSnapshot

logger = logging.getLogger(__name__)


class ScopeToken:
    """Process-wide token allowing one active scope at a time.

    Waiters are served in the order they asked for the token. On release
    the token is handed directly to the oldest waiter, so a thread arriving
    later cannot overtake the queue.

    Attributes
    ----------
    _waiters : deque[threading.Event]
        Pending acquisitions, oldest first
    _held : bool
        Whether a scope currently owns the token
    _owner : int | None
        Ident of the thread that acquired the token
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._waiters: deque[threading.Event] = deque()
        self._held = False
        self._owner: int | None = None

    @property
    def held(self) -> bool:
        with self._lock:
            return self._held

    @property
    def owner(self) -> int | None:
        with self._lock:
            return self._owner

    @property
    def waiting(self) -> int:
        """Number of acquisitions queued behind the current holder."""
        with self._lock:
            return len(self._waiters)

    def acquire(self, blocking: bool = True, timeout: float | None = None) -> None:
        """Take the token.

        Parameters
        ----------
        blocking : bool
            Wait for the token if it is held, otherwise fail immediately
        timeout : float | None
            Maximum seconds to wait when blocking, None waits forever

        Raises
        ------
        ScopeContentionError
            If the token is unavailable and blocking is False, or the
            calling thread already holds it
        ScopeContentionTimeoutError
            If the wait exceeded timeout
        """
        me = threading.get_ident()
        if timeout is not None and math.isinf(timeout):
            timeout = None

        with self._lock:
            if self._held and self._owner == me:
                raise ScopeContentionError(
                    "An environment scope is already active in this thread",
                    owner_thread=me,
                )

            if not self._held and not self._waiters:
                self._held = True
                self._owner = me
                return

            if not blocking:
                raise ScopeContentionError(
                    "An environment scope is already active", owner_thread=self._owner
                )

            ticket = threading.Event()
            self._waiters.append(ticket)
            logger.debug(
                "Waiting for environment scope token (%d waiter(s) queued)",
                len(self._waiters),
            )

        try:
            ticket.wait(timeout)
        except BaseException:
            with self._lock:
                if ticket.is_set():
                    self._hand_off()
                else:
                    self._waiters.remove(ticket)
            raise

        with self._lock:
            if ticket.is_set():
                self._owner = me
                return

            self._waiters.remove(ticket)
            owner = self._owner

        raise ScopeContentionTimeoutError(
            f"Timed out after {timeout}s waiting for the environment scope token",
            timeout=timeout,
            owner_thread=owner,
        )

    def release(self) -> None:
        """Release the token, handing it to the oldest waiter if any."""
        with self._lock:
            if not self._held:
                return

            self._hand_off()

    def _hand_off(self) -> None:
        # Caller holds self._lock and the token is held.
        self._owner = None
        if self._waiters:
            self._waiters.popleft().set()
        else:
            self._held = False


_token = ScopeToken()
_scope_ids = itertools.count(1)


class TempEnvScope:
    """Restores every environment variable change made while it is active.

    Creating the scope takes the process-wide token and captures the
    environment. Disposing it, explicitly with dispose() or by leaving a
    ``with`` block, puts the environment back exactly as captured and
    releases the token. Disposal happens once; later calls are no-ops.

    Parameters
    ----------
    blocking : bool | None
        Wait for another active scope to finish. None uses the configured
        default
    timeout : float | None | Default
        Maximum seconds to wait for the token, None to wait forever.
        FROM_SETTINGS uses the configured default
    environ : MutableMapping[str, str] | None
        Environment to guard, defaults to ``os.environ``

    Raises
    ------
    ScopeContentionError
        If another scope is active and blocking is disabled
    ScopeContentionTimeoutError
        If the wait for another scope exceeded timeout
    """

    def __init__(
        self,
        *,
        blocking: bool | None = None,
        timeout: float | None | Default = FROM_SETTINGS,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        if blocking is None or timeout is FROM_SETTINGS:
            settings = get_settings()
            if blocking is None:
                blocking = settings.blocking
            if timeout is FROM_SETTINGS:
                timeout = settings.timeout

        self._environ = environ if environ is not None else os.environ
        self._disposed = False
        self._dispose_lock = threading.Lock()
        self.scope_id = next(_scope_ids)

        _token.acquire(blocking=blocking, timeout=timeout)
        try:
            self._snapshot = EnvSnapshot.capture(self._environ)
        except BaseException:
            _token.release()
            raise

        logger.debug(
            "Environment scope opened with %d variables",
            len(self._snapshot),
            extra={"scope_id": self.scope_id},
        )

    def __enter__(self) -> "TempEnvScope":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "active" if self.is_active else "disposed"
        return f"<TempEnvScope id={self.scope_id} {state}>"

    @property
    def snapshot(self) -> EnvSnapshot:
        return self._snapshot

    @property
    def is_active(self) -> bool:
        return not self._disposed

    def set(self, key: str, value: str) -> None:
        """Set an environment variable inside the scope.

        Parameters
        ----------
        key : str
            Environment variable name
        value : str
            Environment variable value
        """
        self._environ[key] = value

    def unset(self, key: str) -> None:
        """Remove an environment variable inside the scope if it is set.

        Parameters
        ----------
        key : str
            Environment variable name
        """
        self._environ.pop(key, None)

    def changes(self) -> EnvChanges:
        """Report what changed in the environment since the scope opened."""
        return self._snapshot.diff(self._environ)

    def dispose(self) -> None:
        """Restore the captured environment and release the token.

        The token is released even if restoration fails, so later scopes
        are not starved.

        Raises
        ------
        RestorationError
            If one or more variables could not be restored
        """
        with self._dispose_lock:
            if self._disposed:
                return
            self._disposed = True

        try:
            if logger.isEnabledFor(logging.DEBUG):
                changes = self.changes()
                logger.debug(
                    "Restoring environment (%s)",
                    changes.summary(),
                    extra={"scope_id": self.scope_id},
                )
            self._snapshot.restore(self._environ)
        finally:
            _token.release()
            logger.debug(
                "Environment scope closed", extra={"scope_id": self.scope_id}
            )
