"""Exceptions for kinesis-consumer."""

from typing import Any

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class KinesisConsumerError(Exception):
    """
    Base exception for all kinesis-consumer errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class ConfigurationError(KinesisConsumerError):
    """
    Base exception for build-time configuration errors.

    Raised while discovering bindings or synthesizing the template. These
    errors abort the build before any remote resource is touched and are
    never retried.
    """

    pass


class PackagingError(KinesisConsumerError):
    """Raised when the lifecycle handler package cannot be built."""

    pass


# ---------------------------------------------------------------------------
# Configuration Exceptions
# ---------------------------------------------------------------------------


class ValidationError(ConfigurationError):
    """
    Raised when a user-supplied option is invalid.

    Attributes:
        field: Name of the offending option
        value: The rejected value
        reason: Human-readable explanation
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class MissingFunctionResourceError(ConfigurationError):
    """Raised when a binding's function has no resource in the template."""

    def __init__(self, logical_id: str) -> None:
        self.logical_id = logical_id
        super().__init__(f"Missing function resource {logical_id}")


class MissingEventSourceMappingError(ConfigurationError):
    """Raised when a binding's event source mapping is not in the template."""

    def __init__(self, logical_id: str) -> None:
        self.logical_id = logical_id
        super().__init__(f"Missing event source mapping resource {logical_id}")


class UnexpectedRoleError(ConfigurationError):
    """Raised when a function's ``Role`` is not an ``Fn::GetAtt`` reference."""

    def __init__(self, logical_id: str) -> None:
        self.logical_id = logical_id
        super().__init__(f"Unexpected Role for {logical_id} (expected 'Fn::GetAtt')")


class UnsupportedStreamArnError(ConfigurationError):
    """
    Raised when a stream identifier has no recognizable stream name.

    Supported shapes are ``Fn::GetAtt``, ``Fn::ImportValue`` and a literal
    ARN string.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Unsupported stream arn {value!r}")
