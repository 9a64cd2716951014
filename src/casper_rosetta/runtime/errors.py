"""
Casper Rosetta Error Model

This module provides the error handling framework for the Casper Rosetta
middleware. Every error carries a stable numeric code, a retriable flag and
enough context (deploy hash, address, stage) to attribute the failure, and
renders itself as a Rosetta ``Error`` object.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List
from enum import IntEnum


class ErrorCode(IntEnum):
    """Rosetta error codes exposed through /network/options."""

    # General errors (1-99)
    UNKNOWN = 1
    CONFIGURATION = 2
    INVALID_ADDRESS = 3
    NOT_FOUND = 4
    UNSUPPORTED_IDENTIFIER = 5
    UNIMPLEMENTED = 6
    UNAVAILABLE_OFFLINE = 7

    # Encoding errors (100-199)
    UNABLE_TO_PARSE_INTERMEDIATE_RESULT = 101

    # Upstream errors (200-299)
    UPSTREAM_UNAVAILABLE = 200
    UPSTREAM_RPC_ERROR = 201
    REQUEST_CANCELLED = 202
    DEADLINE_EXCEEDED = 203

    # Assembly errors (400-499)
    INCONSISTENT_EXECUTION_RESULT = 401
    INCOMPLETE_BLOCK = 402


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.UNKNOWN: "Unknown error",
    ErrorCode.CONFIGURATION: "Invalid configuration",
    ErrorCode.INVALID_ADDRESS: "Invalid address",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.UNSUPPORTED_IDENTIFIER: "Unsupported block identifier",
    ErrorCode.UNIMPLEMENTED: "Endpoint not implemented",
    ErrorCode.UNAVAILABLE_OFFLINE: "Endpoint unavailable offline",
    ErrorCode.UNABLE_TO_PARSE_INTERMEDIATE_RESULT: "Unable to parse intermediate result",
    ErrorCode.UPSTREAM_UNAVAILABLE: "Casper node unavailable",
    ErrorCode.UPSTREAM_RPC_ERROR: "Casper node returned an error",
    ErrorCode.REQUEST_CANCELLED: "Request cancelled",
    ErrorCode.DEADLINE_EXCEEDED: "Request deadline exceeded",
    ErrorCode.INCONSISTENT_EXECUTION_RESULT: "Deploy has no execution result",
    ErrorCode.INCOMPLETE_BLOCK: "Unable to build every transaction in block",
}

RETRIABLE_CODES = frozenset({
    ErrorCode.UPSTREAM_UNAVAILABLE,
    ErrorCode.DEADLINE_EXCEEDED,
    ErrorCode.INCOMPLETE_BLOCK,
})


class CasperRosettaError(Exception):
    """
    Base class for all Casper Rosetta errors.

    Provides structured error information that maps onto the Rosetta
    ``Error`` object.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize an error.

        Args:
            message: Error message
            code: Error code
            details: Attribution context (deploy hash, address, stage, ...)
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    @property
    def retriable(self) -> bool:
        """Whether the same request may succeed if repeated."""
        return self.code in RETRIABLE_CODES

    def with_details(self, **details: Any) -> "CasperRosettaError":
        """Add attribution context without overwriting existing keys."""
        for key, value in details.items():
            self.details.setdefault(key, value)
        return self

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a Rosetta Error object."""
        result: Dict[str, Any] = {
            "code": int(self.code),
            "message": ERROR_MESSAGES.get(self.code, self.message),
            "retriable": self.retriable,
        }
        details = dict(self.details)
        details["context"] = self.message
        if self.cause:
            details["cause"] = str(self.cause)
        result["details"] = details
        return result


class ConfigurationError(CasperRosettaError):
    """Environment configuration is missing or invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CONFIGURATION, details, cause)


class InvalidAddressError(CasperRosettaError):
    """Unrecognized address shape or malformed hex."""

    def __init__(self, message: str, address: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        details = dict(details or {})
        if address is not None:
            details.setdefault("address", address)
        super().__init__(message, ErrorCode.INVALID_ADDRESS, details, cause)


class NotFoundError(CasperRosettaError):
    """Block, deploy or state item absent from the node."""

    def __init__(self, message: str = "Not found",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NOT_FOUND, details, cause)


class UnsupportedIdentifierError(CasperRosettaError):
    """Neither a block hash nor a height was supplied."""

    def __init__(self, message: str = "Block identifier must carry a hash or an index",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.UNSUPPORTED_IDENTIFIER, details)


class UnimplementedError(CasperRosettaError):
    """Endpoint is recognised but not supported."""

    def __init__(self, endpoint: str):
        super().__init__(f"{endpoint} is not supported", ErrorCode.UNIMPLEMENTED, {"endpoint": endpoint})


class UnavailableOfflineError(CasperRosettaError):
    """Endpoint needs node access while running in offline mode."""

    def __init__(self, endpoint: str):
        super().__init__(f"{endpoint} is unavailable in offline mode",
                         ErrorCode.UNAVAILABLE_OFFLINE, {"endpoint": endpoint})


class UnableToParseError(CasperRosettaError):
    """Node or client payload could not be decoded."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UNABLE_TO_PARSE_INTERMEDIATE_RESULT, details, cause)


class UpstreamUnavailableError(CasperRosettaError):
    """Transport failure talking to the Casper node."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UPSTREAM_UNAVAILABLE, details, cause)


class UpstreamRpcError(CasperRosettaError):
    """The node answered with a JSON-RPC error that is not a missing item."""

    def __init__(self, message: str, rpc_code: Optional[int] = None, rpc_data: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        if rpc_data is not None:
            details["rpc_data"] = rpc_data
        super().__init__(message, ErrorCode.UPSTREAM_RPC_ERROR, details)
        self.rpc_code = rpc_code


class RequestCancelledError(CasperRosettaError):
    """The caller cancelled the request context."""

    def __init__(self, message: str = "Request cancelled", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.REQUEST_CANCELLED, details)


class DeadlineExceededError(CasperRosettaError):
    """The request context deadline passed."""

    def __init__(self, message: str = "Request deadline exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DEADLINE_EXCEEDED, details)


class InconsistentExecutionResultError(CasperRosettaError):
    """Deploy exists but carries no execution result."""

    def __init__(self, deploy_hash: str, message: Optional[str] = None):
        super().__init__(message or f"Deploy {deploy_hash} has no execution results",
                         ErrorCode.INCONSISTENT_EXECUTION_RESULT, {"deploy_hash": deploy_hash})


class IncompleteBlockError(CasperRosettaError):
    """
    One or more deploys of a block could not be turned into transactions.

    Sibling deploys are still attempted; ``failures`` maps every failed
    deploy hash to its error and ``transactions`` holds the ones that
    were built.
    """

    def __init__(self, block_hash: str, failures: Dict[str, CasperRosettaError],
                 transactions: Optional[List[Any]] = None):
        super().__init__(
            f"{len(failures)} deploy(s) of block {block_hash} could not be assembled",
            ErrorCode.INCOMPLETE_BLOCK,
            {"block_hash": block_hash, "failed_deploys": sorted(failures)},
        )
        self.failures = failures
        self.transactions = transactions or []

    @property
    def retriable(self) -> bool:
        """Whether at least one failed deploy may succeed if repeated."""
        return any(error.retriable for error in self.failures.values())


def all_errors() -> List[Dict[str, Any]]:
    """Return the error catalogue advertised by /network/options."""
    return [
        {"code": int(code), "message": ERROR_MESSAGES[code], "retriable": code in RETRIABLE_CODES}
        for code in ErrorCode
    ]
