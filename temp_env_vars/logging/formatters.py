"""Logging formatters for scope-tagged records."""

import logging


class ScopeFormatter(logging.Formatter):
    """Logging formatter that prepends the scope id from the extra parameter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with scope prefix if present.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message with optional scope prefix
        """
        msg = super().format(record)
        scope_id = getattr(record, "scope_id", None)

        if scope_id is not None:
            return f"[scope {scope_id}] {msg}"

        return msg
