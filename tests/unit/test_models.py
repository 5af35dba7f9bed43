"""Tests for models."""

import pytest

from kinesis_consumer.exceptions import ValidationError
from kinesis_consumer.models import ConsumerBinding, SynthesisOptions, code_from_s3


class TestSynthesisOptions:
    """Tests for SynthesisOptions validation and defaults."""

    def test_defaults(self) -> None:
        options = SynthesisOptions(service="shop", stage="dev")
        assert options.runtime == "python3.12"
        assert options.timeout == 900
        assert options.handler == "kinesis_consumer_handler.handler.on_event"
        assert options.code == {
            "S3Bucket": {"Ref": "ServerlessDeploymentBucket"},
            "S3Key": "kinesis-consumer/handler.zip",
        }

    def test_empty_service_raises(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SynthesisOptions(service="", stage="dev")
        assert exc_info.value.field == "service"

    def test_empty_stage_raises(self) -> None:
        with pytest.raises(ValidationError):
            SynthesisOptions(service="shop", stage="")

    @pytest.mark.parametrize("timeout", [0, 901])
    def test_timeout_range(self, timeout: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SynthesisOptions(service="shop", stage="dev", timeout=timeout)
        assert exc_info.value.field == "timeout"

    def test_memory_range(self) -> None:
        with pytest.raises(ValidationError):
            SynthesisOptions(service="shop", stage="dev", memory_size=64)


class TestConsumerBinding:
    """Tests for ConsumerBinding."""

    def test_is_frozen(self) -> None:
        binding = ConsumerBinding("F", "FLambdaFunction", "arn", "Mapping", "c", "FConsumerS")
        with pytest.raises(AttributeError):
            binding.consumer_name = "other"  # type: ignore[misc]


def test_code_from_s3() -> None:
    assert code_from_s3("bucket", "key.zip") == {"S3Bucket": "bucket", "S3Key": "key.zip"}
