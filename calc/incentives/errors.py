"""
Exception taxonomy for the incentive calculator.

- ConfigurationError: bad or repeated setup, never retried
- SnapshotInvariantError: an unreachable snapshot branch was reached (a bug)
- ExternalDependencyError: a pool, token or oracle read failed; the caller
  retries on a later call
"""

from __future__ import annotations


class IncentiveCalculatorError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(IncentiveCalculatorError, ValueError):
    """Zero/missing init parameters, double initialization, or use before init."""


class SnapshotInvariantError(IncentiveCalculatorError, RuntimeError):
    """A snapshot transition was requested for a status that cannot be snapshotted."""


class ExternalDependencyError(IncentiveCalculatorError, RuntimeError):
    """A collaborator (reward pool, token, price oracle) failed to answer."""


class StalePriceError(ExternalDependencyError):
    """A price oracle reported data older than the allowed staleness."""

    def __init__(self, token: str, age: int, max_staleness: int):
        super().__init__(
            f"Price for {token} is {age}s old (max staleness {max_staleness}s)"
        )
        self.token = token
        self.age = age
        self.max_staleness = max_staleness


class RpcError(ExternalDependencyError):
    """JSON-RPC call failed or returned an error payload."""
