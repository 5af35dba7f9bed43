"""Core models for kinesis-consumer."""

from dataclasses import dataclass, field
from typing import Any

from .exceptions import ValidationError

DEFAULT_HANDLER = "kinesis_consumer_handler.handler.on_event"
DEFAULT_RUNTIME = "python3.12"

# Lambda hard ceiling; the lifecycle handler has no poll limit of its own
MAX_TIMEOUT_SECONDS = 900


@dataclass(frozen=True)
class ConsumerBinding:
    """
    One stream event of one function that requests a fan-out consumer.

    Produced by binding discovery and consumed once by the synthesizer.

    Attributes:
        function_name: Normalized function name
        function_logical_id: Logical id of the function resource
        stream_arn: Stream ARN, either a literal string or a CloudFormation
            intrinsic (``Fn::GetAtt`` / ``Fn::ImportValue``)
        stream_logical_id: Logical id of the existing event source mapping
        consumer_name: Declared or derived consumer name (unqualified)
        consumer_logical_id: Alphanumeric logical id for the consumer resource
    """

    function_name: str
    function_logical_id: str
    stream_arn: Any
    stream_logical_id: str
    consumer_name: str
    consumer_logical_id: str


def code_from_s3(bucket: Any, key: str) -> dict[str, Any]:
    """Build a Lambda ``Code`` property pointing at an S3 artifact."""
    return {"S3Bucket": bucket, "S3Key": key}


@dataclass
class SynthesisOptions:
    """
    Build-time configuration for consumer synthesis.

    Attributes:
        service: Service name, first part of every qualified consumer name
        stage: Deployment stage, second part of every qualified consumer name
        code: CloudFormation ``Code`` property for the lifecycle handler
        runtime: Lambda runtime of the lifecycle handler
        timeout: Handler timeout in seconds, which bounds consumer polling
        memory_size: Handler memory in MB
        handler: Handler entry point inside the package
    """

    service: str
    stage: str
    code: dict[str, Any] = field(
        default_factory=lambda: code_from_s3(
            {"Ref": "ServerlessDeploymentBucket"}, "kinesis-consumer/handler.zip"
        )
    )
    runtime: str = DEFAULT_RUNTIME
    timeout: int = MAX_TIMEOUT_SECONDS
    memory_size: int = 128
    handler: str = DEFAULT_HANDLER

    def __post_init__(self) -> None:
        if not self.service:
            raise ValidationError("service", self.service, "Service name cannot be empty")
        if not self.stage:
            raise ValidationError("stage", self.stage, "Stage cannot be empty")
        if not 1 <= self.timeout <= MAX_TIMEOUT_SECONDS:
            raise ValidationError(
                "timeout", self.timeout, f"Must be between 1 and {MAX_TIMEOUT_SECONDS} seconds"
            )
        if not 128 <= self.memory_size <= 10240:
            raise ValidationError("memory_size", self.memory_size, "Must be between 128 and 10240")
