"""
Error taxonomy for the topology service.

All three families map to the same external signal (bare HTTP 500);
the distinction only matters for diagnostics.
"""


class TopologyError(RuntimeError):
    """Base class for topology service failures."""


class VolumeDiscoveryError(TopologyError):
    """Raised when the cluster volume listing fails (transport or connection)."""


class RequestDecodeError(TopologyError):
    """Raised when a request body or query target cannot be decoded."""


class ResponseEncodeError(TopologyError):
    """Raised when a computed response cannot be serialized."""
