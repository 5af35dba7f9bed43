"""Tests for consumer binding discovery."""

from unittest.mock import MagicMock

import pytest

from kinesis_consumer.discovery import discover_bindings, get_consumer_name, get_stream_name
from kinesis_consumer.exceptions import UnsupportedStreamArnError
from kinesis_consumer.models import ConsumerBinding
from kinesis_consumer.naming import Naming

FUNCTIONS = {
    "skip": {},
    "test": {
        "events": [
            {"stream": "arn:test:foo:bar"},
            {"stream": {"type": "dynamodb"}},
            {"stream": {"type": "kinesis"}},
            {
                "stream": {
                    "type": "kinesis",
                    "consumer": True,
                    "arn": {"Fn::GetAtt": ["Stream", "Arn"]},
                }
            },
            {
                "stream": {
                    "type": "kinesis",
                    "consumer": "testing",
                    "arn": {"Fn::GetAtt": ["OtherStream", "Arn"]},
                }
            },
        ]
    },
    "other": {
        "events": [
            {"stream": "arn:test:foo:bar"},
            {"stream": {"type": "dynamodb"}},
            {"stream": {"type": "kinesis"}},
        ]
    },
}


@pytest.fixture
def naming() -> MagicMock:
    """Stubbed naming oracle returning fixed ids."""
    oracle = MagicMock()
    oracle.get_normalized_function_name.return_value = "Test"
    oracle.get_lambda_logical_id.return_value = "TestLambdaFunction"
    oracle.get_stream_logical_id.return_value = "Stream"
    oracle.normalize_name_to_alpha_numeric_only.return_value = "Normalized"
    return oracle


class TestGetStreamName:
    """Test stream name extraction."""

    def test_get_att(self) -> None:
        assert get_stream_name({"Fn::GetAtt": ["Stream", "Arn"]}) == "Stream"

    def test_get_att_string_form(self) -> None:
        assert get_stream_name({"Fn::GetAtt": "Orders.Arn"}) == "Orders"

    def test_import_value(self) -> None:
        assert get_stream_name({"Fn::ImportValue": "Stream"}) == "Stream"

    def test_nested_import_value_raises(self) -> None:
        arn = {"Fn::ImportValue": {"Fn::Sub": "${AWS::StackName}-OrdersArn"}}
        with pytest.raises(UnsupportedStreamArnError) as exc_info:
            get_stream_name(arn)
        assert exc_info.value.value == arn

    def test_get_att_with_intrinsic_resource_raises(self) -> None:
        with pytest.raises(UnsupportedStreamArnError):
            get_stream_name({"Fn::GetAtt": [{"Ref": "Name"}, "Arn"]})

    def test_literal_arn(self) -> None:
        assert get_stream_name("arn:aws:kinesis:region:acct:stream/my-stream") == "my-stream"

    def test_unsupported_intrinsic_raises(self) -> None:
        with pytest.raises(UnsupportedStreamArnError):
            get_stream_name({"Ref": "Stream"})

    def test_arn_without_resource_segment_raises(self) -> None:
        with pytest.raises(UnsupportedStreamArnError):
            get_stream_name("arn:aws:kinesis:region:acct:stream")

    def test_missing_arn_raises(self) -> None:
        with pytest.raises(UnsupportedStreamArnError):
            get_stream_name(None)


class TestGetConsumerName:
    """Test consumer name derivation."""

    def test_explicit_name_passes_through(self) -> None:
        assert get_consumer_name("testing", "Test", "Stream") == "testing"

    def test_flag_derives_name(self) -> None:
        assert get_consumer_name(True, "Test", "Stream") == "TestStreamConsumer"

    def test_empty_string_derives_name(self) -> None:
        assert get_consumer_name("", "Test", "Stream") == "TestStreamConsumer"


class TestDiscoverBindings:
    """Test discover_bindings."""

    def test_collects_flagged_kinesis_streams_in_order(self, naming: MagicMock) -> None:
        bindings = discover_bindings(FUNCTIONS, naming)

        assert bindings == [
            ConsumerBinding(
                function_name="Test",
                function_logical_id="TestLambdaFunction",
                stream_arn={"Fn::GetAtt": ["Stream", "Arn"]},
                stream_logical_id="Stream",
                consumer_name="TestStreamConsumer",
                consumer_logical_id="Normalized",
            ),
            ConsumerBinding(
                function_name="Test",
                function_logical_id="TestLambdaFunction",
                stream_arn={"Fn::GetAtt": ["OtherStream", "Arn"]},
                stream_logical_id="Stream",
                consumer_name="testing",
                consumer_logical_id="Normalized",
            ),
        ]

    def test_passes_function_and_stream_to_oracle(self, naming: MagicMock) -> None:
        discover_bindings(FUNCTIONS, naming)

        naming.get_lambda_logical_id.assert_called_with("test")
        naming.get_stream_logical_id.assert_called_with("test", "kinesis", "OtherStream")
        naming.normalize_name_to_alpha_numeric_only.assert_called_with("TestConsumerOtherStream")

    def test_functions_without_consumers_contribute_nothing(self, naming: MagicMock) -> None:
        functions = {"skip": {}, "none": None, "other": FUNCTIONS["other"]}
        assert discover_bindings(functions, naming) == []

    def test_no_functions(self, naming: MagicMock) -> None:
        assert discover_bindings(None, naming) == []

    def test_default_naming(self) -> None:
        functions = {
            "process-orders": {
                "events": [
                    {
                        "stream": {
                            "type": "kinesis",
                            "consumer": True,
                            "arn": "arn:aws:kinesis:us-east-1:123456789012:stream/order-events",
                        }
                    }
                ]
            }
        }

        [binding] = discover_bindings(functions, Naming())

        assert binding.function_name == "ProcessDashorders"
        assert binding.function_logical_id == "ProcessDashordersLambdaFunction"
        assert binding.stream_logical_id == "ProcessDashordersEventSourceMappingKinesisOrderevents"
        assert binding.consumer_name == "ProcessDashordersorder-eventsConsumer"
        assert binding.consumer_logical_id == "ProcessDashordersConsumerorderevents"

    def test_nested_import_value_stops_discovery(self) -> None:
        functions = {
            "process": {
                "events": [
                    {
                        "stream": {
                            "type": "kinesis",
                            "consumer": True,
                            "arn": {"Fn::ImportValue": {"Fn::Sub": "x-OrdersArn"}},
                        }
                    }
                ]
            }
        }
        with pytest.raises(UnsupportedStreamArnError):
            discover_bindings(functions, Naming())
