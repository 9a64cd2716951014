"""Runtime helpers for the Casper Rosetta middleware"""

from .errors import (
    ErrorCode,
    CasperRosettaError,
    ConfigurationError,
    InvalidAddressError,
    NotFoundError,
    UnsupportedIdentifierError,
    UnimplementedError,
    UnavailableOfflineError,
    UnableToParseError,
    UpstreamUnavailableError,
    UpstreamRpcError,
    RequestCancelledError,
    DeadlineExceededError,
    InconsistentExecutionResultError,
    IncompleteBlockError,
    all_errors,
)
from .context import RequestContext

__all__ = [
    "ErrorCode",
    "CasperRosettaError",
    "ConfigurationError",
    "InvalidAddressError",
    "NotFoundError",
    "UnsupportedIdentifierError",
    "UnimplementedError",
    "UnavailableOfflineError",
    "UnableToParseError",
    "UpstreamUnavailableError",
    "UpstreamRpcError",
    "RequestCancelledError",
    "DeadlineExceededError",
    "InconsistentExecutionResultError",
    "IncompleteBlockError",
    "all_errors",
    "RequestContext",
]
