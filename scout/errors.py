"""Exception types raised by the scout agent."""


class ScoutError(Exception):
    """Base class for agent errors."""


class InvalidInputError(ScoutError, ValueError):
    """Input the decision core refuses to guess about (empty batch, bad key)."""


class ConfigError(ScoutError):
    """Configuration that cannot produce a working agent."""


class DataUnavailableError(ScoutError):
    """A data provider could not supply telemetry for one pool or position."""

    def __init__(self, address: str, reason: str):
        super().__init__(f"{address}: {reason}")
        self.address = address
        self.reason = reason


class ExecutionError(ScoutError):
    """The execution collaborator failed to settle a rebalance."""
