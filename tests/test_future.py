import pytest

from futura import Deferred, Future, QueueScheduler, Status, deferred


def test_executor_runs_synchronously():
    calls = []
    Future(lambda resolve, reject: calls.append('executor'))
    assert calls == ['executor']


def test_executor_failure_rejects():
    error = RuntimeError('boom')

    def executor(resolve, reject):
        raise error

    future = Future(executor)
    assert future.status is Status.REJECTED
    assert future.reason is error


def test_executor_failure_after_settlement_is_ignored():
    def executor(resolve, reject):
        resolve('ok')
        raise RuntimeError('late')

    future = Future(executor)
    assert future.is_fulfilled
    assert future.value == 'ok'


def test_settlement_happens_once():
    d = deferred()
    d.resolve(1)
    d.resolve(2)
    d.reject('nope')
    assert d.future.status == 'fulfilled'
    assert d.future.value == 1
    assert d.future.reason is None

    d = deferred()
    d.reject('first')
    d.resolve('second')
    assert d.future.is_rejected
    assert d.future.reason == 'first'
    assert d.future.value is None


def test_then_is_never_synchronous(scheduler):
    calls = []
    future = Future.resolve('v')
    future.then(calls.append)
    assert calls == []
    assert scheduler.pending == 1

    scheduler.run()
    assert calls == ['v']


def test_pending_continuations_are_deferred_at_settlement(scheduler):
    calls = []
    d = deferred()
    d.future.then(calls.append)
    d.resolve('later')
    assert calls == []

    scheduler.run()
    assert calls == ['later']


def test_handlers_run_in_registration_order(scheduler):
    calls = []
    d = deferred()
    d.future.then(lambda v: calls.append('A'))
    d.future.then(lambda v: calls.append('B'))
    d.future.then(lambda v: calls.append('C'))
    d.resolve(None)
    scheduler.run()
    assert calls == ['A', 'B', 'C']


def test_rejection_handlers_run_in_registration_order(scheduler):
    calls = []
    d = deferred()
    for name in 'ABC':
        d.future.catch(lambda r, name=name: calls.append(name))
    d.reject('x')
    scheduler.run()
    assert calls == ['A', 'B', 'C']


def test_handlers_are_called_once(scheduler):
    calls = []
    d = deferred()
    d.future.then(calls.append, calls.append)
    d.resolve(1)
    scheduler.run()
    d.resolve(2)
    d.reject(3)
    scheduler.run()
    assert calls == [1]


def test_each_subscriber_gets_an_independent_future(scheduler):
    source = Future.resolve(2)
    doubled = source.then(lambda v: v * 2)
    failed = source.then(lambda v: 1 / 0)
    scheduler.run()

    assert doubled is not failed
    assert doubled.value == 4
    assert isinstance(failed.reason, ZeroDivisionError)
    assert source.value == 2


def test_missing_handlers_pass_outcome_through(scheduler):
    fulfilled = Future.resolve('value').then().then(None, lambda r: 'unused')
    reason = object()
    rejected = Future.reject(reason).then(lambda v: 'unused').then(lambda v: 'unused')
    scheduler.run()

    assert fulfilled.value == 'value'
    assert rejected.is_rejected
    assert rejected.reason is reason


def test_non_callable_handlers_are_ignored(scheduler):
    fulfilled = Future.resolve(1).then(5, 'x')
    rejected = Future.reject('r').then(5, 'x')
    scheduler.run()
    assert fulfilled.value == 1
    assert rejected.reason == 'r'


def test_handler_exception_rejects_dependent(scheduler):
    error = ValueError('bad')

    def handler(value):
        raise error

    result = Future.resolve(1).then(handler)
    scheduler.run()
    assert result.reason is error


def test_catch_recovers(scheduler):
    result = Future.reject('e').catch(lambda r: r + '!').then(lambda v: v * 2)
    scheduler.run()
    assert result.value == 'e!e!'


def test_chained_values_flow_through(scheduler):
    result = Future.resolve(1).then(lambda v: v + 1).then(lambda v: v * 10)
    scheduler.run()
    assert result.value == 20


def test_dependent_futures_share_the_scheduler(scheduler):
    future = Future.resolve(1)
    assert future.scheduler is scheduler
    assert future.then().scheduler is scheduler


def test_finally_passes_value_through(scheduler):
    result = Future.resolve('foo').finally_(lambda: Future.resolve('ignored'))
    scheduler.run()
    assert result.value == 'foo'


def test_finally_passes_reason_through(scheduler):
    calls = []
    result = Future.reject('bar').finally_(lambda: calls.append('cleanup'))
    scheduler.run()
    assert calls == ['cleanup']
    assert result.is_rejected
    assert result.reason == 'bar'


def test_finally_waits_for_returned_future(scheduler):
    gate = deferred()
    result = Future.resolve(1).finally_(lambda: gate.future)
    scheduler.run()
    assert result.is_pending

    gate.resolve('ignored')
    scheduler.run()
    assert result.value == 1


def test_finally_failure_overrides_outcome(scheduler):
    error = RuntimeError('cleanup failed')

    def cleanup():
        raise error

    raised = Future.resolve(1).finally_(cleanup)
    rejected = Future.reject('original').finally_(lambda: Future.reject('override'))
    scheduler.run()
    assert raised.reason is error
    assert rejected.reason == 'override'


def test_deferred_handles():
    d = Future.deferred()
    assert isinstance(d, Deferred)
    assert d.promise is d.future
    assert Future.defer().future.is_pending

    d.resolve('done')
    assert d.future.value == 'done'


def test_repr():
    assert repr(Future()) == '<Future (pending)>'
    assert repr(Future.resolve(3)) == '<Future 3>'
    assert repr(Future.reject('e')) == "<Future 'e' (rejected)>"


def test_finally_with_non_callable_passes_outcome_through(scheduler):
    fulfilled = Future.resolve('kept').finally_(None)
    rejected = Future.reject('still rejected').finally_('not callable')
    scheduler.run()
    assert fulfilled.value == 'kept'
    assert rejected.reason == 'still rejected'


class RefusingScheduler(QueueScheduler):
    """Refuses the first ``refusals`` tasks it is given."""

    def __init__(self, refusals):
        super().__init__()
        self.refusals = refusals

    def schedule(self, callback, *args):
        if self.refusals:
            self.refusals -= 1
            raise RuntimeError('scheduler unavailable')
        super().schedule(callback, *args)


def test_refused_continuations_stay_queued_in_order():
    scheduler = RefusingScheduler(refusals=1)
    calls = []
    d = deferred(scheduler)
    d.future.then(lambda v: calls.append(('A', v)))
    d.future.then(lambda v: calls.append(('B', v)))

    with pytest.raises(RuntimeError, match='scheduler unavailable'):
        d.resolve(1)
    assert d.future.is_fulfilled

    d.future.then(lambda v: calls.append(('C', v)))
    scheduler.run()
    assert calls == [('A', 1), ('B', 1), ('C', 1)]
