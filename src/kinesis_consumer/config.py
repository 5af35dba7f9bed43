"""Service configuration loading.

Reads the subset of a ``serverless.yml`` that consumer synthesis needs:
the service name, the provider stage and the ``functions`` mapping.
CloudFormation short-form tags (``!GetAtt``, ``!ImportValue``, ...) are
expanded to their ``Fn::`` forms so stream ARNs compare equal to the ones in
the compiled template.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ValidationError

DEFAULT_STAGE = "dev"


class CloudFormationLoader(yaml.SafeLoader):
    """SafeLoader that understands CloudFormation short-form intrinsics."""


def _construct_get_att(loader: yaml.SafeLoader, node: yaml.Node) -> dict[str, Any]:
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        return {"Fn::GetAtt": value.split(".", 1)}
    return {"Fn::GetAtt": loader.construct_sequence(node, deep=True)}


def _intrinsic(name: str):
    def construct(loader: yaml.SafeLoader, node: yaml.Node) -> dict[str, Any]:
        if isinstance(node, yaml.ScalarNode):
            return {name: loader.construct_scalar(node)}
        if isinstance(node, yaml.SequenceNode):
            return {name: loader.construct_sequence(node, deep=True)}
        return {name: loader.construct_mapping(node, deep=True)}

    return construct


CloudFormationLoader.add_constructor("!GetAtt", _construct_get_att)
CloudFormationLoader.add_constructor("!Ref", _intrinsic("Ref"))
for _tag in ("ImportValue", "Join", "Sub", "Select", "Split", "If", "FindInMap"):
    CloudFormationLoader.add_constructor(f"!{_tag}", _intrinsic(f"Fn::{_tag}"))


@dataclass
class ServiceConfig:
    """Service-level settings read from the deployment configuration."""

    service: str
    stage: str = DEFAULT_STAGE
    functions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], stage: str | None = None, service: str | None = None
    ) -> ServiceConfig:
        service = service or data.get("service")
        # Older configs use ``service: {name: ...}``
        if isinstance(service, dict):
            service = service.get("name")
        if not service:
            raise ValidationError("service", service, "Service name is required")

        provider = data.get("provider") or {}
        return cls(
            service=service,
            stage=stage or provider.get("stage") or DEFAULT_STAGE,
            functions=data.get("functions") or {},
        )


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML document that may contain CloudFormation tags."""
    with open(path) as f:
        data = yaml.load(f, Loader=CloudFormationLoader)  # noqa: S506
    if not isinstance(data, dict):
        raise ValidationError("config", str(path), "YAML file must contain a mapping")
    return data


def load_service_config(
    path: str | Path, stage: str | None = None, service: str | None = None
) -> ServiceConfig:
    return ServiceConfig.from_dict(load_yaml(path), stage=stage, service=service)


def load_template(path: str | Path) -> dict[str, Any]:
    """Load a compiled template (JSON, or YAML with short-form tags)."""
    text = Path(path).read_text()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.load(text, Loader=CloudFormationLoader)  # noqa: S506
    if not isinstance(data, dict):
        raise ValidationError("template", str(path), "Template must contain a mapping")
    return data
