"""futura: single-settlement futures with deferred, ordered delivery."""

from futura.future import (
  Future,
  Deferred,
  Continuation,
  Status,
  deferred
)

from futura.resolution import (
  Thenable,
  OnceFlag,
  is_thenable,
  resolve_value
)

from futura.scheduler import (
  Scheduler,
  QueueScheduler,
  AsyncioScheduler
)

from futura.config import (
  get_scheduler,
  set_scheduler,
  reset_all
)

from futura.errors import (
  ChainingCycleError,
  AggregateError,
  RejectedError
)

__all__ = [
  # Futures
  'Future',
  'Deferred',
  'Continuation',
  'Status',
  'deferred',

  # Resolution
  'Thenable',
  'OnceFlag',
  'is_thenable',
  'resolve_value',

  # Scheduling
  'Scheduler',
  'QueueScheduler',
  'AsyncioScheduler',

  # Configuration
  'get_scheduler',
  'set_scheduler',
  'reset_all',

  # Errors
  'ChainingCycleError',
  'AggregateError',
  'RejectedError',
]
