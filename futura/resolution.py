"""Resolution procedure: how a produced value settles a dependent future.

A value returned from a ``then`` callback may itself be a future, or any
foreign object with a callable ``then`` attribute. Such values are adopted:
the dependent future waits for them and takes on their eventual outcome,
recursively, until a plain value or a rejection is reached.
"""
import inspect
from functools import partial
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from .errors import ChainingCycleError

_MISSING = object()

Settle = Callable[[Any], None]


@runtime_checkable
class Thenable(Protocol):
    """Anything exposing ``then(on_fulfilled, on_rejected)``."""

    def then(self, on_fulfilled: Optional[Callable] = None, on_rejected: Optional[Callable] = None) -> Any:
        ...


class OnceFlag:
    """A flag that can be claimed exactly once."""

    __slots__ = ('_claimed',)

    def __init__(self):
        self._claimed = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    def claim(self) -> bool:
        """Claim the flag. Returns True only for the first caller."""
        if self._claimed:
            return False
        self._claimed = True
        return True


def _then_member(value: Any) -> Any:
    """Read ``value.then``, or ``_MISSING`` when no such member is defined.

    Existence is decided statically, so an exception raised while reading a
    defined member (AttributeError included) reaches the caller.
    """
    # Classes carry unbound ``then`` functions; they are plain values here
    if isinstance(value, type):
        return _MISSING
    if inspect.getattr_static(value, 'then', _MISSING) is _MISSING:
        return _MISSING
    return value.then


def is_thenable(value: Any) -> bool:
    """True if ``value`` exposes a callable ``then``. Never invokes it."""
    try:
        return callable(_then_member(value))
    except Exception:
        return False


def resolve_value(dependent: Any, value: Any, fulfill: Settle, reject: Settle) -> None:
    """Settle ``dependent`` from ``value`` using its ``fulfill``/``reject`` callbacks."""
    if value is dependent:
        reject(ChainingCycleError())
        return

    once = OnceFlag()
    try:
        then = _then_member(value)
        if callable(then):
            then(
                partial(_adopt_value, once, dependent, fulfill, reject),
                partial(_adopt_reason, once, reject),
            )
            return
    except Exception as e:
        if once.claim():
            reject(e)
        return

    fulfill(value)


def _adopt_value(once: OnceFlag, dependent: Any, fulfill: Settle, reject: Settle, value: Any = None) -> None:
    if once.claim():
        resolve_value(dependent, value, fulfill, reject)


def _adopt_reason(once: OnceFlag, reject: Settle, reason: Any = None) -> None:
    if once.claim():
        reject(reason)
