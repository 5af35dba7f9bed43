"""Discover stream events that request an enhanced fan-out consumer.

Pure functions over the service's ``functions`` configuration; no template
or network access happens here.
"""

from collections.abc import Mapping
from typing import Any

from .exceptions import UnsupportedStreamArnError
from .models import ConsumerBinding
from .naming import NamingOracle, get_att_resource

STREAM_TYPE = "kinesis"


def get_stream_name(arn: Any) -> str:
    """
    Extract the stream name from a stream identifier.

    Args:
        arn: ``{"Fn::GetAtt": [name, attr]}`` (or ``"name.attr"``),
            ``{"Fn::ImportValue": name}``
            or a literal ``arn:...:stream/name`` string

    Returns:
        The stream name

    Raises:
        UnsupportedStreamArnError: If no name can be extracted
    """
    if isinstance(arn, Mapping):
        name = None
        if "Fn::GetAtt" in arn:
            name = get_att_resource(arn["Fn::GetAtt"])
        elif "Fn::ImportValue" in arn and isinstance(arn["Fn::ImportValue"], str):
            name = arn["Fn::ImportValue"] or None
        # Nested intrinsics (e.g. ImportValue of a Sub) cannot be named at build time
        if name is None:
            raise UnsupportedStreamArnError(arn)
        return name

    if isinstance(arn, str):
        parts = arn.split("/")
        if len(parts) > 1 and parts[1]:
            return parts[1]

    raise UnsupportedStreamArnError(arn)


def get_consumer_name(consumer: Any, function_name: str, stream_name: str) -> str:
    """Use an explicit consumer name, or derive one from function and stream."""
    if isinstance(consumer, str) and consumer:
        return consumer
    return f"{function_name}{stream_name}Consumer"


def _requests_consumer(event: Any) -> bool:
    if not isinstance(event, Mapping):
        return False
    stream = event.get("stream")
    return (
        isinstance(stream, Mapping)
        and stream.get("type") == STREAM_TYPE
        and bool(stream.get("consumer"))
    )


def discover_bindings(
    functions: Mapping[str, Any] | None,
    naming: NamingOracle,
) -> list[ConsumerBinding]:
    """
    Collect consumer bindings from a service's function configuration.

    Order follows the functions mapping and, within a function, its events.

    Args:
        functions: ``{function_name: {"events": [...]}}``
        naming: Naming oracle used to compute logical ids

    Returns:
        One binding per stream event that requests a consumer
    """
    bindings: list[ConsumerBinding] = []

    for name, config in (functions or {}).items():
        events = config.get("events") if isinstance(config, Mapping) else None
        if not isinstance(events, list):
            continue

        for event in events:
            if not _requests_consumer(event):
                continue

            stream = event["stream"]
            function_name = naming.get_normalized_function_name(name)
            stream_arn = stream.get("arn")
            stream_name = get_stream_name(stream_arn)

            bindings.append(
                ConsumerBinding(
                    function_name=function_name,
                    function_logical_id=naming.get_lambda_logical_id(name),
                    stream_arn=stream_arn,
                    stream_logical_id=naming.get_stream_logical_id(
                        name, STREAM_TYPE, stream_name
                    ),
                    consumer_name=get_consumer_name(
                        stream.get("consumer"), function_name, stream_name
                    ),
                    consumer_logical_id=naming.normalize_name_to_alpha_numeric_only(
                        f"{function_name}Consumer{stream_name}"
                    ),
                )
            )

    return bindings
