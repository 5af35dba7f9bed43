"""Lambda handler for the ``Custom::KinesisConsumer`` resource.

Handles CloudFormation lifecycle events (RequestType, ResourceProperties):

- Create: register the consumer, wait until it is ``ACTIVE``
- Update: nothing to reconcile, re-reports the existing consumer ARN
- Delete: deregister the consumer, wait until it is gone

Status is always read back from Kinesis; nothing is cached between
invocations.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .response import custom_resource

logger = logging.getLogger(__name__)
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

BACKOFF_BASE_SECONDS = float(os.environ.get("BACKOFF_BASE_SECONDS", "1"))

ACTIVE = "ACTIVE"
NOT_FOUND = "ResourceNotFoundException"


def backoff_delay(attempt: int, base: float = BACKOFF_BASE_SECONDS) -> float:
    """Seconds to wait after the ``attempt``-th poll (1-based)."""
    return attempt**2 * base


def is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == NOT_FOUND


class ConsumerLifecycle:
    """
    Drives one stream consumer through registration and removal.

    Register and deregister are issued exactly once per call; only the
    describe polling repeats.

    Args:
        client: boto3 Kinesis client
        sleep: Blocking sleep function
        base_delay: Backoff unit in seconds
    """

    def __init__(
        self,
        client: Any,
        sleep: Callable[[float], None] = time.sleep,
        base_delay: float = BACKOFF_BASE_SECONDS,
    ) -> None:
        self.client = client
        self.sleep = sleep
        self.base_delay = base_delay

    def create(self, consumer_name: str, stream_arn: str) -> dict[str, Any]:
        """Register the consumer and return its ARN once active."""
        response = self.client.register_stream_consumer(
            StreamARN=stream_arn, ConsumerName=consumer_name
        )
        consumer_arn = response["Consumer"]["ConsumerARN"]
        logger.info("Registered consumer %s", consumer_arn)

        self.wait_for_active(consumer_arn)
        return {"ConsumerARN": consumer_arn}

    def delete(self, consumer_name: str, stream_arn: str) -> None:
        """Deregister the consumer and return once Kinesis no longer knows it."""
        try:
            self.client.deregister_stream_consumer(
                StreamARN=stream_arn, ConsumerName=consumer_name
            )
        except ClientError as e:
            if not is_not_found(e):
                raise
            logger.info("Consumer %s already absent", consumer_name)
            return

        self.wait_for_delete(consumer_name, stream_arn)

    def wait_for_active(self, consumer_arn: str) -> None:
        attempt = 1
        while True:
            response = self.client.describe_stream_consumer(ConsumerARN=consumer_arn)
            status = response["ConsumerDescription"]["ConsumerStatus"]
            if status == ACTIVE:
                logger.info("Consumer %s is active after %d polls", consumer_arn, attempt)
                return

            delay = backoff_delay(attempt, self.base_delay)
            logger.debug("Consumer %s is %s, retrying in %.1fs", consumer_arn, status, delay)
            self.sleep(delay)
            attempt += 1

    def wait_for_delete(self, consumer_name: str, stream_arn: str) -> None:
        attempt = 1
        while True:
            try:
                self.client.describe_stream_consumer(
                    StreamARN=stream_arn, ConsumerName=consumer_name
                )
            except ClientError as e:
                if is_not_found(e):
                    logger.info("Consumer %s deleted after %d polls", consumer_name, attempt)
                    return
                raise

            delay = backoff_delay(attempt, self.base_delay)
            logger.debug("Consumer %s still present, retrying in %.1fs", consumer_name, delay)
            self.sleep(delay)
            attempt += 1


def handle_event(event: dict[str, Any], lifecycle: ConsumerLifecycle) -> dict[str, Any]:
    """Dispatch one lifecycle event and return the resource's output attributes."""
    request_type = event.get("RequestType")
    properties = event.get("ResourceProperties", {})

    if request_type == "Create":
        return lifecycle.create(properties["ConsumerName"], properties["StreamARN"])

    if request_type == "Delete":
        lifecycle.delete(properties["ConsumerName"], properties["StreamARN"])
        return {}

    if request_type == "Update":
        logger.info("Update of %s is not reconciled", properties.get("ConsumerName"))
        # Keeps Fn::GetAtt ConsumerARN resolvable after the update
        return {"ConsumerARN": event.get("PhysicalResourceId")}

    logger.info("Skipping RequestType: %s", request_type)
    return {}


@custom_resource
def on_event(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""
    lifecycle = ConsumerLifecycle(boto3.client("kinesis"))
    return handle_event(event, lifecycle)
