"""Decorator running a function inside an environment scope."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, TypeVar, overload

from temp_env_vars.constants import FROM_SETTINGS, Default
from temp_env_vars.scope import TempEnvScope

F = TypeVar("F", bound=Callable[..., Any])


@overload
def temp_env_vars(func: F) -> F: ...


@overload
def temp_env_vars(
    *, blocking: bool | None = None, timeout: float | None | Default = FROM_SETTINGS
) -> Callable[[F], F]: ...


def temp_env_vars(
    func: Callable[..., Any] | None = None,
    *,
    blocking: bool | None = None,
    timeout: float | None | Default = FROM_SETTINGS,
) -> Any:
    """Reset every environment variable change made by the decorated function.

    Usable bare (``@temp_env_vars``) or with arguments
    (``@temp_env_vars(timeout=5)``). A scope is opened right before the
    function body runs and disposed when it returns or raises, so calls
    made through this decorator run one at a time across threads.
    Coroutine functions are supported; the token is taken synchronously,
    so a second decorated coroutine on the same event loop fails with
    ScopeContentionError instead of waiting.

    Parameters
    ----------
    func : Callable | None
        Function to wrap when used without arguments
    blocking : bool | None
        Passed to TempEnvScope
    timeout : float | None | Default
        Passed to TempEnvScope; None waits forever

    Returns
    -------
    Callable
        Wrapped function, or a decorator when called with arguments only
    """

    def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with TempEnvScope(blocking=blocking, timeout=timeout):
                    return await fn(*args, **kwargs)

            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with TempEnvScope(blocking=blocking, timeout=timeout):
                return fn(*args, **kwargs)

        return wrapper

    if func is not None:
        return decorate(func)

    return decorate
