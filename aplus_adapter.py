"""Conformance-harness adapter for futura futures."""
from typing import Any
from futura import (
    Deferred,
    Future,
    deferred
)

def resolved(value: Any) -> Future:
    """A future fulfilled with ``value``."""
    return Future.resolve(value)

def rejected(reason: Any) -> Future:
    """A future rejected with ``reason``."""
    return Future.reject(reason)

__all__ = [
    'Deferred',
    'resolved',
    'rejected',
    'deferred'
]
