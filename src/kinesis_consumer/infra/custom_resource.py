"""Insert Lambda-backed custom resources into a CloudFormation template.

Every custom resource of one kind shares a single handler function and its
execution role::

    {Name}CustomResourceRole      AWS::IAM::Role
    {Name}CustomResourceFunction  AWS::Lambda::Function
    {resource_name}               Custom::{Name}

Inline role policies are keyed by ``PolicyName``; adding a policy that
already exists replaces it, so callers always pass the full, current policy.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


def role_logical_id(name: str) -> str:
    return f"{name}CustomResourceRole"


def function_logical_id(name: str) -> str:
    return f"{name}CustomResourceFunction"


def _build_role() -> dict[str, Any]:
    return {
        "Type": "AWS::IAM::Role",
        "Properties": {
            "AssumeRolePolicyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {"Service": ["lambda.amazonaws.com"]},
                        "Action": ["sts:AssumeRole"],
                    }
                ],
            },
            "ManagedPolicyArns": [BASIC_EXECUTION_POLICY_ARN],
            "Policies": [],
        },
    }


def _build_function(
    name: str,
    code: dict[str, Any],
    runtime: str,
    timeout: int,
    memory_size: int,
    handler: str,
) -> dict[str, Any]:
    return {
        "Type": "AWS::Lambda::Function",
        "Properties": {
            "Code": code,
            "Handler": handler,
            "Runtime": runtime,
            "Timeout": timeout,
            "MemorySize": memory_size,
            "Role": {"Fn::GetAtt": [role_logical_id(name), "Arn"]},
        },
        "DependsOn": [role_logical_id(name)],
    }


def attach_role_policy(role: dict[str, Any], policy: dict[str, Any]) -> None:
    """Add an inline policy to a role, replacing one with the same name."""
    policies = role["Properties"].setdefault("Policies", [])
    for index, existing in enumerate(policies):
        if existing.get("PolicyName") == policy["PolicyName"]:
            policies[index] = policy
            return
    policies.append(policy)


def add_custom_resource(
    template: dict[str, Any],
    *,
    resource_name: str,
    name: str,
    code: dict[str, Any],
    properties: dict[str, Any],
    policies: list[dict[str, Any]] | None = None,
    runtime: str,
    timeout: int,
    memory_size: int,
    handler: str,
) -> str:
    """
    Add a custom resource and, on first use, its handler function and role.

    Args:
        template: Compiled CloudFormation template, mutated in place
        resource_name: Logical id of the new custom resource
        name: Custom resource kind, e.g. ``KinesisConsumer``
        code: ``Code`` property of the handler function
        properties: Properties passed to the handler
        policies: Inline policies for the shared execution role
        runtime: Handler runtime
        timeout: Handler timeout in seconds
        memory_size: Handler memory in MB
        handler: Handler entry point

    Returns:
        Logical id of the custom resource
    """
    resources = template.setdefault("Resources", {})

    role_id = role_logical_id(name)
    function_id = function_logical_id(name)

    if role_id not in resources:
        resources[role_id] = _build_role()
    if function_id not in resources:
        resources[function_id] = _build_function(
            name, code, runtime, timeout, memory_size, handler
        )
        logger.debug("Added custom resource handler %s", function_id)

    for policy in policies or []:
        attach_role_policy(resources[role_id], policy)

    resources[resource_name] = {
        "Type": f"Custom::{name}",
        "Properties": {
            "ServiceToken": {"Fn::GetAtt": [function_id, "Arn"]},
            **properties,
        },
        "DependsOn": [role_id],
    }

    return resource_name
