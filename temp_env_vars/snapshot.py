"""Point-in-time capture and restoration of the process environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from types import MappingProxyType

from temp_env_vars.exceptions import RestorationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvChanges:
    """Difference between a snapshot and a later environment.

    Attributes
    ----------
    added : tuple[str, ...]
        Names set after the snapshot was captured.
    modified : tuple[str, ...]
        Names whose value differs from the snapshot.
    removed : tuple[str, ...]
        Names present in the snapshot but no longer set.
    """

    added: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.modified or self.removed)

    def summary(self) -> str:
        return (
            f"{len(self.added)} added, {len(self.modified)} modified, "
            f"{len(self.removed)} removed"
        )


class EnvSnapshot(Mapping[str, str]):
    """Immutable copy of every environment variable at capture time.

    Parameters
    ----------
    variables : Mapping[str, str]
        Variables to freeze. The mapping is copied.
    """

    def __init__(self, variables: Mapping[str, str]) -> None:
        self._variables = MappingProxyType(dict(variables))

    @classmethod
    def capture(cls, environ: Mapping[str, str] | None = None) -> "EnvSnapshot":
        """Capture the current environment.

        Parameters
        ----------
        environ : Mapping[str, str] | None
            Environment to read, defaults to ``os.environ``

        Returns
        -------
        EnvSnapshot
            Frozen copy of every variable currently defined
        """
        if environ is None:
            environ = os.environ
        return cls(environ)

    def __getitem__(self, name: str) -> str:
        return self._variables[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"EnvSnapshot({len(self)} variables)"

    def diff(self, environ: Mapping[str, str] | None = None) -> EnvChanges:
        """Compare the snapshot against an environment.

        Parameters
        ----------
        environ : Mapping[str, str] | None
            Environment to compare, defaults to ``os.environ``

        Returns
        -------
        EnvChanges
            Names added, modified and removed since capture
        """
        if environ is None:
            environ = os.environ
        current = dict(environ)

        added = sorted(name for name in current if name not in self._variables)
        removed = sorted(name for name in self._variables if name not in current)
        modified = sorted(
            name
            for name, value in self._variables.items()
            if name in current and current[name] != value
        )
        return EnvChanges(tuple(added), tuple(modified), tuple(removed))

    def restore(self, environ: MutableMapping[str, str] | None = None) -> None:
        """Make the environment identical to the snapshot.

        Removes every variable not present in the snapshot, then sets every
        snapshotted variable to its captured value. Every variable is
        attempted even if an earlier one fails.

        Parameters
        ----------
        environ : MutableMapping[str, str] | None
            Environment to restore, defaults to ``os.environ``

        Raises
        ------
        RestorationError
            If the environment rejected one or more set or unset calls
        """
        if environ is None:
            environ = os.environ

        failures: dict[str, Exception] = {}
        extra = [name for name in list(environ) if name not in self._variables]

        for name in extra:
            try:
                environ.pop(name, None)
            except (OSError, ValueError) as e:
                logger.error("Failed to unset environment variable %s: %s", name, e)
                failures[name] = e

        for name, value in self._variables.items():
            try:
                environ[name] = value
            except (OSError, ValueError) as e:
                logger.error("Failed to restore environment variable %s: %s", name, e)
                failures[name] = e

        if failures:
            raise RestorationError(failures)
