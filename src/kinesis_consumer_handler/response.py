"""CloudFormation custom resource response contract.

CloudFormation waits for a JSON document PUT to the pre-signed
``ResponseURL`` of each request. :func:`custom_resource` wraps a plain
handler so that its return value becomes a ``SUCCESS`` response and any
exception becomes a ``FAILED`` one.
"""

from __future__ import annotations

import functools
import json
import logging
import urllib.request
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

SUCCESS = "SUCCESS"
FAILED = "FAILED"


def _log_stream(context: Any) -> str:
    return getattr(context, "log_stream_name", "unknown")


def send_response(
    event: dict[str, Any],
    context: Any,
    status: str,
    data: dict[str, Any] | None = None,
    physical_resource_id: str | None = None,
    reason: str | None = None,
) -> None:
    """PUT a custom resource response to the event's ``ResponseURL``."""
    body = json.dumps(
        {
            "Status": status,
            "Reason": reason or f"See the details in CloudWatch Log Stream: {_log_stream(context)}",
            "PhysicalResourceId": physical_resource_id or _log_stream(context),
            "StackId": event.get("StackId"),
            "RequestId": event.get("RequestId"),
            "LogicalResourceId": event.get("LogicalResourceId"),
            "NoEcho": False,
            "Data": data or {},
        }
    ).encode()

    request = urllib.request.Request(
        event["ResponseURL"],
        data=body,
        method="PUT",
        headers={"Content-Type": "", "Content-Length": str(len(body))},
    )
    with urllib.request.urlopen(request, timeout=30) as resp:
        logger.info("Sent %s response, status code %s", status, resp.status)


def _physical_resource_id(
    event: dict[str, Any], context: Any, data: dict[str, Any] | None
) -> str:
    if event.get("PhysicalResourceId"):
        return event["PhysicalResourceId"]
    if data and data.get("ConsumerARN"):
        return data["ConsumerARN"]
    return _log_stream(context)


def custom_resource(
    func: Callable[[dict[str, Any], Any], dict[str, Any] | None],
) -> Callable[[dict[str, Any], Any], dict[str, Any] | None]:
    """
    Adapt a handler to the custom resource response contract.

    Events without a ``ResponseURL`` (direct invocations) are passed
    through unchanged: the result is returned and errors propagate.
    """

    @functools.wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any] | None:
        if "ResponseURL" not in event:
            return func(event, context)

        try:
            data = func(event, context)
        except Exception as e:
            logger.exception("%s request failed", event.get("RequestType"))
            send_response(
                event,
                context,
                FAILED,
                physical_resource_id=_physical_resource_id(event, context, None),
                reason=str(e),
            )
            return None

        send_response(
            event,
            context,
            SUCCESS,
            data=data,
            physical_resource_id=_physical_resource_id(event, context, data),
        )
        return data

    return wrapper
