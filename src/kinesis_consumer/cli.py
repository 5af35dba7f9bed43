"""Command-line interface for kinesis-consumer."""

import json
import logging
import sys
from pathlib import Path

import click

from .config import load_service_config, load_template
from .discovery import discover_bindings
from .exceptions import KinesisConsumerError
from .infra.handler_builder import get_handler_info, write_handler_package
from .models import SynthesisOptions, code_from_s3
from .naming import Naming, qualify_consumer_name
from .synthesizer import synthesize as synthesize_template


@click.group()
@click.version_option(package_name="kinesis-consumer")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Kinesis fan-out consumer provisioning CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    required=True,
    type=click.Path(exists=True),
    help="Service configuration (serverless.yml)",
)
@click.option(
    "--template",
    "-t",
    "template_path",
    required=True,
    type=click.Path(exists=True),
    help="Compiled CloudFormation template to rewrite",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path (default: stdout)",
)
@click.option("--stage", help="Deployment stage (default: provider.stage or 'dev')")
@click.option("--service", help="Service name (default: service from the configuration)")
@click.option(
    "--code-bucket",
    help="S3 bucket holding the handler package (default: ServerlessDeploymentBucket)",
)
@click.option(
    "--code-key",
    default="kinesis-consumer/handler.zip",
    show_default=True,
    help="S3 key of the handler package",
)
@click.option(
    "--timeout",
    default=900,
    type=int,
    show_default=True,
    help="Lifecycle handler timeout in seconds (bounds consumer polling)",
)
def synthesize(
    config_path: str,
    template_path: str,
    output: str | None,
    stage: str | None,
    service: str | None,
    code_bucket: str | None,
    code_key: str,
    timeout: int,
) -> None:
    """Add fan-out consumers to a compiled CloudFormation template."""
    try:
        config = load_service_config(config_path, stage=stage, service=service)
        template = load_template(template_path)

        bucket = code_bucket or {"Ref": "ServerlessDeploymentBucket"}
        options = SynthesisOptions(
            service=config.service,
            stage=config.stage,
            code=code_from_s3(bucket, code_key),
            timeout=timeout,
        )

        bindings = discover_bindings(config.functions, Naming())
        synthesize_template(template, bindings, options)
    except KinesisConsumerError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    rendered = json.dumps(template, indent=2)
    if output:
        Path(output).write_text(rendered + "\n")
        click.echo(f"✓ Configured {len(bindings)} consumer(s), template written to: {output}")
    else:
        click.echo(rendered)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    required=True,
    type=click.Path(exists=True),
    help="Service configuration (serverless.yml)",
)
@click.option("--stage", help="Deployment stage (default: provider.stage or 'dev')")
@click.option("--service", help="Service name (default: service from the configuration)")
def bindings(config_path: str, stage: str | None, service: str | None) -> None:
    """List stream events that request a fan-out consumer."""
    try:
        config = load_service_config(config_path, stage=stage, service=service)
        found = discover_bindings(config.functions, Naming())
    except KinesisConsumerError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    if not found:
        click.echo("No consumer bindings found.")
        return

    for binding in found:
        qualified = qualify_consumer_name(config.service, config.stage, binding.consumer_name)
        click.echo(f"{binding.function_logical_id} -> {binding.consumer_logical_id} ({qualified})")
        click.echo(f"  mapping: {binding.stream_logical_id}")
        click.echo(f"  stream:  {json.dumps(binding.stream_arn)}")


@cli.command("handler-export")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="handler.zip",
    help="Output file path (default: handler.zip)",
)
@click.option(
    "--info",
    is_flag=True,
    help="Show package information without building",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing file without prompting",
)
def handler_export(output: str, info: bool, force: bool) -> None:
    """Export the lifecycle handler deployment package."""
    try:
        if info:
            pkg_info = get_handler_info()
            click.echo()
            click.echo("Handler Package Information")
            click.echo("=" * 27)
            click.echo()
            click.echo(f"Package path:      {pkg_info['package_path']}")
            click.echo(f"Python files:      {pkg_info['python_files']}")
            click.echo(f"Uncompressed size: {int(pkg_info['uncompressed_size']) / 1024:.1f} KB")
            click.echo(f"Handler:           {pkg_info['handler']}")
            click.echo()
            return

        output_path = Path(output)

        if output_path.exists() and not force:
            click.echo(f"File already exists: {output_path}", err=True)
            click.echo("Use --force to overwrite.", err=True)
            sys.exit(1)

        size_bytes = write_handler_package(output_path)
        size_kb = size_bytes / 1024

        click.echo(f"✓ Exported handler package to: {output_path} ({size_kb:.1f} KB)")

    except Exception as e:
        click.echo(f"✗ Failed to export handler package: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
