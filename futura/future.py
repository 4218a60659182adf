"""Future implementation: single settlement, deferred delivery, chaining."""
from collections import deque
from enum import Enum
from functools import partial
from typing import Any, Callable, Deque, Dict, Generic, Iterable, List, Optional, TypeVar

from . import config
from .errors import AggregateError
from .resolution import resolve_value
from .scheduler import Scheduler

T = TypeVar('T')

Executor = Callable[[Callable[..., None], Callable[..., None]], Any]


class Status(str, Enum):
    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'


class Continuation:
    """A queued ``then`` registration and the future it settles."""

    __slots__ = ('on_fulfilled', 'on_rejected', 'dependent')

    def __init__(self,
                 on_fulfilled: Optional[Callable[[Any], Any]],
                 on_rejected: Optional[Callable[[Any], Any]],
                 dependent: 'Future'):
        self.on_fulfilled = on_fulfilled
        self.on_rejected = on_rejected
        self.dependent = dependent


def _identity(value):
    return value


class Future(Generic[T]):
    """A container for a value that is not yet known.

    The executor runs synchronously inside the constructor and receives two
    callbacks, ``resolve(value)`` and ``reject(reason)``. Whichever is called
    first settles the future; later calls are ignored. An exception raised by
    the executor rejects the future.

    Callbacks registered with ``then`` are handed to the future's scheduler,
    so they never run before the registering call returns, and they run in
    registration order.
    """

    def __init__(self, executor: Optional[Executor] = None, scheduler: Optional[Scheduler] = None):
        self._status = Status.PENDING
        self._value: Optional[T] = None
        self._reason: Any = None
        self._continuations: Deque[Continuation] = deque()
        self._scheduler = scheduler if scheduler is not None else config.get_scheduler()

        if executor is None:
            return
        try:
            executor(self._fulfill, self._reject)
        except Exception as e:
            self._reject(e)

    @property
    def status(self) -> Status:
        return self._status

    @property
    def value(self) -> Optional[T]:
        """The fulfillment value, or None unless fulfilled."""
        return self._value

    @property
    def reason(self) -> Any:
        """The rejection reason, or None unless rejected."""
        return self._reason

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def is_pending(self) -> bool:
        return self._status is Status.PENDING

    @property
    def is_fulfilled(self) -> bool:
        return self._status is Status.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self._status is Status.REJECTED

    def _fulfill(self, value: Any = None) -> None:
        if self._status is not Status.PENDING:
            return
        self._status = Status.FULFILLED
        self._value = value
        self._dispatch()

    def _reject(self, reason: Any = None) -> None:
        if self._status is not Status.PENDING:
            return
        self._status = Status.REJECTED
        self._reason = reason
        self._dispatch()

    def _dispatch(self) -> None:
        # One at a time: a continuation the scheduler refuses stays queued,
        # ahead of any registered later
        queue = self._continuations
        while queue:
            continuation = queue.popleft()
            try:
                self._scheduler.schedule(self._run, continuation)
            except Exception:
                queue.appendleft(continuation)
                raise

    def _run(self, continuation: Continuation) -> None:
        """Invoke one continuation against the settled state."""
        dependent = continuation.dependent
        if self._status is Status.FULFILLED:
            handler = continuation.on_fulfilled
            if handler is None:
                handler = _identity
            argument = self._value
        elif continuation.on_rejected is None:
            dependent._reject(self._reason)
            return
        else:
            handler = continuation.on_rejected
            argument = self._reason

        try:
            result = handler(argument)
        except Exception as e:
            dependent._reject(e)
            return
        resolve_value(dependent, result, dependent._fulfill, dependent._reject)

    def then(self,
             on_fulfilled: Optional[Callable[[T], Any]] = None,
             on_rejected: Optional[Callable[[Any], Any]] = None) -> 'Future[Any]':
        """Register callbacks and return a future for their result.

        A missing (or non-callable) ``on_fulfilled`` passes the value through
        and a missing ``on_rejected`` passes the reason through, so
        ``f.then(g)`` still rejects when ``f`` does.
        """
        dependent: Future[Any] = Future(scheduler=self._scheduler)
        continuation = Continuation(
            on_fulfilled if callable(on_fulfilled) else None,
            on_rejected if callable(on_rejected) else None,
            dependent,
        )
        self._continuations.append(continuation)
        if self._status is not Status.PENDING:
            self._dispatch()
        return dependent

    def catch(self, on_rejected: Optional[Callable[[Any], Any]] = None) -> 'Future[Any]':
        """Shorthand for ``then(None, on_rejected)``."""
        return self.then(None, on_rejected)

    def finally_(self, on_settled: Callable[[], Any]) -> 'Future[T]':
        """Run ``on_settled()`` on either outcome, then keep the original outcome.

        If ``on_settled`` returns a future or thenable, the original outcome is
        delivered once it settles. If it raises or its result rejects, that
        rejection replaces the original outcome.
        """
        if not callable(on_settled):
            return self.then()

        scheduler = self._scheduler

        def after_value(value):
            return Future.resolve(on_settled(), scheduler).then(lambda _: value)

        def after_reason(reason):
            return Future.resolve(on_settled(), scheduler).then(lambda _: Future.reject(reason, scheduler))

        return self.then(after_value, after_reason)

    def __repr__(self) -> str:
        if self._status is Status.PENDING:
            v = '(pending)'
        elif self._status is Status.REJECTED:
            v = repr(self._reason) + ' (rejected)'
        else:
            v = repr(self._value)
        return f'<{self.__class__.__name__} {v}>'

    @classmethod
    def resolve(cls, value: Any = None, scheduler: Optional[Scheduler] = None) -> 'Future[Any]':
        """Return ``value`` if it is a future, else a future settled from it.

        Foreign thenables are adopted: the result takes on their outcome.
        """
        if isinstance(value, cls):
            return value
        future: Future[Any] = cls(scheduler=scheduler)
        resolve_value(future, value, future._fulfill, future._reject)
        return future

    @classmethod
    def reject(cls, reason: Any = None, scheduler: Optional[Scheduler] = None) -> 'Future[Any]':
        """Return a future rejected with ``reason``."""
        future: Future[Any] = cls(scheduler=scheduler)
        future._reject(reason)
        return future

    @classmethod
    def all(cls, inputs: Iterable[Any], scheduler: Optional[Scheduler] = None) -> 'Future[List[Any]]':
        """Fulfill with every input's value, in input order, or reject with the first reason."""
        futures = [cls.resolve(item, scheduler) for item in inputs]
        result: Future[List[Any]] = cls(scheduler=scheduler)
        if not futures:
            result._fulfill([])
            return result

        values: List[Any] = [None] * len(futures)
        remaining = len(futures)

        def on_value(index, value):
            nonlocal remaining
            values[index] = value
            remaining -= 1
            if remaining == 0:
                result._fulfill(values)

        for index, future in enumerate(futures):
            future.then(partial(on_value, index), result._reject)
        return result

    @classmethod
    def race(cls, inputs: Iterable[Any], scheduler: Optional[Scheduler] = None) -> 'Future[Any]':
        """Settle like whichever input settles first. Never settles for no inputs."""
        futures = [cls.resolve(item, scheduler) for item in inputs]
        result: Future[Any] = cls(scheduler=scheduler)
        for future in futures:
            future.then(result._fulfill, result._reject)
        return result

    @classmethod
    def all_settled(cls, inputs: Iterable[Any], scheduler: Optional[Scheduler] = None) -> 'Future[List[Dict[str, Any]]]':
        """Fulfill with one outcome record per input, in input order. Never rejects."""
        futures = [cls.resolve(item, scheduler) for item in inputs]
        result: Future[List[Dict[str, Any]]] = cls(scheduler=scheduler)
        if not futures:
            result._fulfill([])
            return result

        outcomes: List[Optional[Dict[str, Any]]] = [None] * len(futures)
        remaining = len(futures)

        def record(index, outcome):
            nonlocal remaining
            outcomes[index] = outcome
            remaining -= 1
            if remaining == 0:
                result._fulfill(outcomes)

        for index, future in enumerate(futures):
            future.then(
                lambda value, i=index: record(i, {'status': Status.FULFILLED, 'value': value}),
                lambda reason, i=index: record(i, {'status': Status.REJECTED, 'reason': reason}),
            )
        return result

    @classmethod
    def any(cls, inputs: Iterable[Any], scheduler: Optional[Scheduler] = None) -> 'Future[Any]':
        """Fulfill with the first fulfilled value; reject with AggregateError if all reject."""
        futures = [cls.resolve(item, scheduler) for item in inputs]
        result: Future[Any] = cls(scheduler=scheduler)
        if not futures:
            result._reject(AggregateError([]))
            return result

        reasons: List[Any] = [None] * len(futures)
        remaining = len(futures)

        def on_reason(index, reason):
            nonlocal remaining
            reasons[index] = reason
            remaining -= 1
            if remaining == 0:
                result._reject(AggregateError(reasons))

        for index, future in enumerate(futures):
            future.then(result._fulfill, partial(on_reason, index))
        return result

    @classmethod
    def deferred(cls, scheduler: Optional[Scheduler] = None) -> 'Deferred[Any]':
        """Create a pending future along with the callbacks that settle it."""
        return Deferred(scheduler, future_class=cls)

    defer = deferred


class Deferred(Generic[T]):
    """A future that can be settled programmatically."""

    def __init__(self, scheduler: Optional[Scheduler] = None, future_class: type = Future):
        self._future: Future[T] = future_class(self._capture, scheduler)

    def _capture(self, resolve: Callable[..., None], reject: Callable[..., None]) -> None:
        self._resolve = resolve
        self._reject = reject

    @property
    def future(self) -> Future[T]:
        """Get the underlying future."""
        return self._future

    promise = future

    def resolve(self, value: Any = None) -> None:
        """Fulfill the future with a value."""
        self._resolve(value)

    def reject(self, reason: Any = None) -> None:
        """Reject the future with a reason."""
        self._reject(reason)


def deferred(scheduler: Optional[Scheduler] = None) -> Deferred[Any]:
    """Create a ``Deferred`` handle for a fresh pending future."""
    return Deferred(scheduler)
