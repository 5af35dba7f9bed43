"""Rewrite a compiled CloudFormation template to use fan-out consumers.

For every :class:`~kinesis_consumer.models.ConsumerBinding` the synthesizer:

1. adds a ``Custom::KinesisConsumer`` resource that registers the consumer,
2. grants the function's role read/subscribe access through one
   ``{FunctionName}ConsumerPolicy`` per function,
3. points the event source mapping at the consumer ARN and makes it depend
   on that policy.

Bindings are applied strictly in order by a single writer. A configuration
error aborts the run immediately; mutations made for earlier bindings stay
in the template.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from .exceptions import (
    MissingEventSourceMappingError,
    MissingFunctionResourceError,
    UnexpectedRoleError,
)
from .infra.custom_resource import add_custom_resource
from .models import ConsumerBinding, SynthesisOptions
from .naming import get_att_resource, qualify_consumer_name

logger = logging.getLogger(__name__)

CUSTOM_RESOURCE_NAME = "KinesisConsumer"
MANAGE_POLICY_NAME = "manage-consumers"
CONSUMER_ARN_ATTRIBUTE = "ConsumerARN"

READ_ACTIONS = [
    "kinesis:DescribeStreamSummary",
    "kinesis:ListShards",
    "kinesis:GetShardIterator",
    "kinesis:GetRecords",
]
SUBSCRIBE_ACTIONS = ["kinesis:SubscribeToShard"]


def distinct_stream_arns(bindings: Iterable[ConsumerBinding]) -> list[Any]:
    """Stream ARNs of all bindings, first occurrence order, no duplicates."""
    arns: list[Any] = []
    for binding in bindings:
        if binding.stream_arn not in arns:
            arns.append(binding.stream_arn)
    return arns


def build_manage_policy(stream_arns: Sequence[Any]) -> dict[str, Any]:
    """Inline policy letting the handler register and remove consumers."""
    return {
        "PolicyName": MANAGE_POLICY_NAME,
        "PolicyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Action": "kinesis:RegisterStreamConsumer",
                    "Resource": list(stream_arns),
                },
                {
                    "Effect": "Allow",
                    "Action": [
                        "kinesis:DeregisterStreamConsumer",
                        "kinesis:DescribeStreamConsumer",
                    ],
                    "Resource": [
                        {"Fn::Join": ["/", [arn, "consumer", "*"]]} for arn in stream_arns
                    ],
                },
            ],
        },
    }


def get_function_role(function_logical_id: str, function_resource: dict[str, Any]) -> dict[str, Any]:
    """
    Resolve a function's execution role into a ``Ref`` to the role resource.

    Raises:
        UnexpectedRoleError: If ``Role`` is not an ``Fn::GetAtt`` reference
    """
    role = function_resource.get("Properties", {}).get("Role")
    if isinstance(role, dict) and "Fn::GetAtt" in role:
        role_logical_id = get_att_resource(role["Fn::GetAtt"])
        if role_logical_id is not None:
            return {"Ref": role_logical_id}
    raise UnexpectedRoleError(function_logical_id)


def prepare_policy(
    resources: dict[str, Any], policy_name: str, role: dict[str, Any]
) -> dict[str, Any]:
    """Return the named function policy, creating it on first use."""
    if policy_name not in resources:
        resources[policy_name] = {
            "Type": "AWS::IAM::Policy",
            "Properties": {
                "PolicyName": policy_name,
                "PolicyDocument": {
                    "Version": "2012-10-17",
                    "Statement": [
                        {"Effect": "Allow", "Action": list(READ_ACTIONS), "Resource": []},
                        {"Effect": "Allow", "Action": list(SUBSCRIBE_ACTIONS), "Resource": []},
                    ],
                },
                "Roles": [role],
            },
        }
    return resources[policy_name]


def _as_list(depends_on: Any) -> list[str]:
    if not depends_on:
        return []
    if isinstance(depends_on, str):
        return [depends_on]
    return [d for d in depends_on if d]


class ConsumerSynthesizer:
    """
    Applies consumer bindings to one compiled template.

    The template is mutated in place; one instance serves one build.
    """

    def __init__(self, template: dict[str, Any], options: SynthesisOptions) -> None:
        self.template = template
        self.options = options
        self.resources: dict[str, Any] = template.setdefault("Resources", {})

    def synthesize(self, bindings: Sequence[ConsumerBinding]) -> dict[str, Any]:
        """
        Apply every binding in order.

        Args:
            bindings: Bindings from :func:`~kinesis_consumer.discovery.discover_bindings`

        Returns:
            The mutated template

        Raises:
            ConfigurationError: On the first binding whose function or
                mapping resource is missing or malformed
        """
        manage_policy = build_manage_policy(distinct_stream_arns(bindings))

        for binding in bindings:
            self._apply(binding, manage_policy)

        return self.template

    def _apply(self, binding: ConsumerBinding, manage_policy: dict[str, Any]) -> None:
        function_resource = self.resources.get(binding.function_logical_id)
        if not function_resource:
            raise MissingFunctionResourceError(binding.function_logical_id)

        function_role = get_function_role(binding.function_logical_id, function_resource)

        mapping_resource = self.resources.get(binding.stream_logical_id)
        if not mapping_resource:
            raise MissingEventSourceMappingError(binding.stream_logical_id)

        consumer_logical_id = add_custom_resource(
            self.template,
            resource_name=binding.consumer_logical_id,
            name=CUSTOM_RESOURCE_NAME,
            code=self.options.code,
            properties={
                "ConsumerName": qualify_consumer_name(
                    self.options.service, self.options.stage, binding.consumer_name
                ),
                "StreamARN": binding.stream_arn,
            },
            policies=[manage_policy],
            runtime=self.options.runtime,
            timeout=self.options.timeout,
            memory_size=self.options.memory_size,
            handler=self.options.handler,
        )

        consumer_arn = {"Fn::GetAtt": [consumer_logical_id, CONSUMER_ARN_ATTRIBUTE]}

        policy_name = f"{binding.function_name}ConsumerPolicy"
        policy = prepare_policy(self.resources, policy_name, function_role)
        statements = policy["Properties"]["PolicyDocument"]["Statement"]
        statements[0]["Resource"].append(binding.stream_arn)
        statements[1]["Resource"].append(consumer_arn)

        mapping_resource.setdefault("Properties", {})["EventSourceArn"] = consumer_arn

        depends_on = [policy_name]
        for dependency in _as_list(mapping_resource.get("DependsOn")):
            if dependency not in depends_on:
                depends_on.append(dependency)
        mapping_resource["DependsOn"] = depends_on

        logger.info(
            "Configured consumer %s for %s on %s",
            consumer_logical_id,
            binding.function_logical_id,
            binding.stream_logical_id,
        )


def synthesize(
    template: dict[str, Any],
    bindings: Sequence[ConsumerBinding],
    options: SynthesisOptions,
) -> dict[str, Any]:
    """Apply ``bindings`` to ``template``; see :class:`ConsumerSynthesizer`."""
    return ConsumerSynthesizer(template, options).synthesize(bindings)
