"""Process-wide configuration for futura."""
import os
from typing import Optional

from .scheduler import AsyncioScheduler, QueueScheduler, Scheduler

SCHEDULER_ENV = 'FUTURA_SCHEDULER'

_SCHEDULERS = {
    'queue': QueueScheduler,
    'asyncio': AsyncioScheduler,
}

# Created lazily so the environment is read at first use, not at import
current_scheduler: Optional[Scheduler] = None

def _scheduler_from_env() -> Scheduler:
    """Build the default scheduler named by the environment."""
    name = os.environ.get(SCHEDULER_ENV, 'queue').strip().lower()
    factory = _SCHEDULERS.get(name)
    if factory is None:
        raise ValueError(f"Unknown {SCHEDULER_ENV} value: {name!r} (expected one of {sorted(_SCHEDULERS)})")
    return factory()

def get_scheduler() -> Scheduler:
    """Get the default scheduler used by futures created without one."""
    global current_scheduler
    if current_scheduler is None:
        current_scheduler = _scheduler_from_env()
    return current_scheduler

def set_scheduler(scheduler: Scheduler) -> None:
    """Set the default scheduler."""
    global current_scheduler
    if not isinstance(scheduler, Scheduler):
        raise TypeError(f"Expected a Scheduler, got {type(scheduler).__name__}")
    current_scheduler = scheduler

def reset_all() -> None:
    """Forget the default scheduler so the next lookup rebuilds it from the environment."""
    global current_scheduler
    current_scheduler = None
