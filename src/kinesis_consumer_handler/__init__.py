"""Lambda lifecycle handler for Kinesis fan-out consumers."""

from .handler import ConsumerLifecycle, backoff_delay, handle_event, on_event

__all__ = ["ConsumerLifecycle", "backoff_delay", "handle_event", "on_event"]
