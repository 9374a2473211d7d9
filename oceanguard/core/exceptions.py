"""
Error taxonomy shared by the collectors and aggregators.

Source-level errors (UpstreamFetchError, ParseError) never leave a collector:
they are logged there and turned into an empty result. AggregationError is
the only error surfaced to callers.
"""


class OceanGuardError(Exception):
    """Base class for all OceanGuard errors."""


class UpstreamFetchError(OceanGuardError):
    """Network failure, timeout or non-2xx response from an external source."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class ParseError(UpstreamFetchError):
    """External source answered with a body we could not decode."""


class AggregationError(OceanGuardError):
    """Failure to compose an aggregate response (e.g. report store unreachable)."""
