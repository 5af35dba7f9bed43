"""
kinesis-consumer: enhanced fan-out consumers for Lambda stream events.

Example:
    from kinesis_consumer import Naming, SynthesisOptions, discover_bindings, synthesize

    bindings = discover_bindings(config["functions"], Naming())
    synthesize(template, bindings, SynthesisOptions(service="orders", stage="prod"))
"""

from .discovery import discover_bindings, get_consumer_name, get_stream_name
from .exceptions import (
    ConfigurationError,
    KinesisConsumerError,
    MissingEventSourceMappingError,
    MissingFunctionResourceError,
    PackagingError,
    UnexpectedRoleError,
    UnsupportedStreamArnError,
    ValidationError,
)
from .models import ConsumerBinding, SynthesisOptions, code_from_s3
from .naming import Naming, NamingOracle, qualify_consumer_name
from .synthesizer import ConsumerSynthesizer, synthesize

__version__ = "0.3.0"

__all__ = [
    "ConfigurationError",
    "ConsumerBinding",
    "ConsumerSynthesizer",
    "KinesisConsumerError",
    "MissingEventSourceMappingError",
    "MissingFunctionResourceError",
    "Naming",
    "NamingOracle",
    "PackagingError",
    "SynthesisOptions",
    "UnexpectedRoleError",
    "UnsupportedStreamArnError",
    "ValidationError",
    "code_from_s3",
    "discover_bindings",
    "get_consumer_name",
    "get_stream_name",
    "qualify_consumer_name",
    "synthesize",
]
