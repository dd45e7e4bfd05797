"""HookInstaller -- behavior-preserving wrappers around host operations.

A hook replaces ``host.<name>`` with a wrapper that

1. runs the instrumentation logic (before the original, or after it when
   ``after=True``), catching and logging anything it raises;
2. calls the original with exactly the arguments it received, through the
   original (bound) reference so ``self`` stays valid;
3. returns the original's result unchanged and lets the original's own
   exceptions propagate.

Installing the same name twice chains two wrappers.  Callers are expected
to install each hook once per attach.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

HookLogic = Callable[..., Any]
"""Called as ``logic(host, *args, **kwargs)``."""


def best_effort(func: F) -> F:
    """Log and swallow any exception raised by *func*; return ``None`` instead."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception:
            logger.exception("Instrumentation error in %s", func.__qualname__)
            return None

    return wrapper  # type: ignore[return-value]


@dataclass
class _InstalledHook:
    """Internal record of one installed wrapper."""

    name: str
    original: Callable[..., Any]
    had_instance_attr: bool


class HookInstaller:
    """Installs and removes hooks on a single host object.

    Parameters
    ----------
    host:
        The game object (or module) whose operations are wrapped.
    """

    def __init__(self, host: Any) -> None:
        self.host = host
        self._installed: list[_InstalledHook] = []

    @property
    def installed(self) -> list[str]:
        """Names hooked so far, in installation order."""
        return [h.name for h in self._installed]

    def install(self, name: str, logic: HookLogic, *, after: bool = False) -> bool:
        """Wrap ``host.<name>`` with *logic*.

        Returns ``False`` (and logs) when the operation is absent or not
        callable; optional game modes may simply not exist on the host.
        """
        original = getattr(self.host, name, None)
        if original is None:
            logger.warning("Host has no %r; hook skipped", name)
            return False
        if not callable(original):
            logger.warning("Host attribute %r is not callable; hook skipped", name)
            return False

        host = self.host

        @functools.wraps(original)
        def hooked(*args: Any, **kwargs: Any) -> Any:
            if not after:
                _run_logic(name, logic, host, args, kwargs)
            result = original(*args, **kwargs)
            if after:
                _run_logic(name, logic, host, args, kwargs)
            return result

        had_instance_attr = name in getattr(host, "__dict__", {})
        setattr(host, name, hooked)
        self._installed.append(_InstalledHook(name, original, had_instance_attr))
        logger.debug("Hooked %s (%s original)", name, "after" if after else "before")
        return True

    def uninstall_all(self) -> None:
        """Restore every hooked operation, most recent first."""
        while self._installed:
            hook = self._installed.pop()
            if hook.had_instance_attr:
                setattr(self.host, hook.name, hook.original)
            else:
                # The original came from the class; drop the shadowing wrapper.
                try:
                    delattr(self.host, hook.name)
                except AttributeError:
                    setattr(self.host, hook.name, hook.original)
            logger.debug("Unhooked %s", hook.name)


def _run_logic(
    name: str,
    logic: HookLogic,
    host: Any,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> None:
    try:
        logic(host, *args, **kwargs)
    except Exception:
        logger.exception("Error in %s hook", name)
