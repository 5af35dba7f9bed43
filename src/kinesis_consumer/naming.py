"""Logical id and resource naming utilities.

This module mirrors the naming rules the Serverless Framework AWS provider
uses for compiled CloudFormation templates, so ids computed here match the
resources already present in a packaged template:

- Function resources: ``{NormalizedFunctionName}LambdaFunction``
- Stream event source mappings:
  ``{NormalizedFunctionName}EventSourceMapping{Type}{AlphaNumericStreamName}``

Any object exposing the same methods as :class:`Naming` can be passed where
a naming oracle is expected.
"""

import re
from typing import Any, Protocol

NON_ALPHANUMERIC = re.compile(r"[^0-9A-Za-z]")


class NamingOracle(Protocol):
    """Naming operations consumed by binding discovery."""

    def get_normalized_function_name(self, function_name: str) -> str: ...

    def get_lambda_logical_id(self, function_name: str) -> str: ...

    def get_stream_logical_id(
        self, function_name: str, stream_type: str, stream_name: str
    ) -> str: ...

    def normalize_name_to_alpha_numeric_only(self, name: str) -> str: ...


class Naming:
    """Default naming oracle following Serverless Framework conventions."""

    def normalize_name(self, name: str) -> str:
        """Upper-case the first character."""
        return name[:1].upper() + name[1:]

    def normalize_name_to_alpha_numeric_only(self, name: str) -> str:
        """Strip everything outside ``[0-9A-Za-z]`` and normalize."""
        return self.normalize_name(NON_ALPHANUMERIC.sub("", name))

    def get_normalized_function_name(self, function_name: str) -> str:
        """
        Normalize a function name for use inside logical ids.

        Examples:
            >>> Naming().get_normalized_function_name("process-orders_v2")
            'ProcessDashordersUnderscorev2'
        """
        return self.normalize_name(function_name.replace("-", "Dash").replace("_", "Underscore"))

    def get_lambda_logical_id(self, function_name: str) -> str:
        return f"{self.get_normalized_function_name(function_name)}LambdaFunction"

    def get_stream_logical_id(self, function_name: str, stream_type: str, stream_name: str) -> str:
        return (
            f"{self.get_normalized_function_name(function_name)}"
            f"EventSourceMapping{self.normalize_name(stream_type)}"
            f"{self.normalize_name_to_alpha_numeric_only(stream_name)}"
        )


def qualify_consumer_name(service: str, stage: str, consumer_name: str) -> str:
    """
    Build the account-unique consumer name registered with Kinesis.

    Args:
        service: Service name
        stage: Deployment stage
        consumer_name: Declared or derived consumer name

    Returns:
        ``{service}-{stage}-{consumer_name}``
    """
    return f"{service}-{stage}-{consumer_name}"


def get_att_resource(value: Any) -> str | None:
    """
    Logical id referenced by an ``Fn::GetAtt`` value.

    Accepts the list form ``[LogicalId, Attribute]`` and the string form
    ``"LogicalId.Attribute"``.

    Returns:
        The logical id, or ``None`` if ``value`` has neither shape
    """
    if isinstance(value, str):
        logical_id = value.split(".", 1)[0]
    elif isinstance(value, list) and value:
        logical_id = value[0]
    else:
        return None
    return logical_id if isinstance(logical_id, str) and logical_id else None
