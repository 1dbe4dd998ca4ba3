"""CLI for Notecard firmware resolution.

Provides commands to classify a model, list published firmware versions
and resolve the download URL for an update.
"""

import asyncio
import json
import logging
import sys

import click
from pydantic import ValidationError

from notecard_firmware.config import ResolverConfig, load_config
from notecard_firmware.errors import ConfigError
from notecard_firmware.hardware import HardwareTypeClassifier
from notecard_firmware.models import (
    LATEST,
    ResolutionFailure,
    ResolutionRequest,
    SelectedArtifact,
    UpdateChannel,
    UpToDate,
)
from notecard_firmware.resolver import FirmwareResolver

logger = logging.getLogger(__name__)

CHANNEL_CHOICES = [channel.value for channel in UpdateChannel]


def _build_resolver(config) -> FirmwareResolver:
    return FirmwareResolver.from_config(config)


def _hardware_type(ctx, model, hardware_type):
    """Resolve --model / --hardware-type into a code, or exit."""
    if (model is None) == (hardware_type is None):
        raise click.UsageError("Provide exactly one of --model or --hardware-type")

    if hardware_type is not None:
        return hardware_type

    classifier = HardwareTypeClassifier(ctx.obj["config"].hardware_types)
    code = classifier.classify(model)
    if code is None:
        click.echo(
            f"✗ Could not determine Notecard type for model '{model}'. "
            f"Check the provided model.",
            err=True
        )
        sys.exit(1)
    return code


def _result_to_dict(result) -> dict:
    if isinstance(result, SelectedArtifact):
        return {
            "status": "selected",
            "url": result.url,
            "version": str(result.version),
            "key": result.key,
        }
    if isinstance(result, UpToDate):
        return {
            "status": "up_to_date",
            "current_version": str(result.current_version),
            "latest_version": str(result.latest_version),
        }
    return {
        "status": "failed",
        "kind": result.kind.value,
        "message": result.message,
        "available_versions": [str(v) for v in result.available_versions],
    }


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to YAML configuration file"
)
@click.option(
    "--timeout",
    type=click.FloatRange(1.0, 300.0),
    default=None,
    help="Listing fetch timeout in seconds"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, timeout, verbose):
    """Notecard firmware resolver CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    if timeout is not None:
        config = ResolverConfig(**{**config.model_dump(), "request_timeout_sec": timeout})

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("model")
@click.pass_context
def classify(ctx, model):
    """Print the hardware type code for MODEL."""
    classifier = HardwareTypeClassifier(ctx.obj["config"].hardware_types)
    code = classifier.classify(model)

    if code is None:
        click.echo(f"✗ Could not determine Notecard type for model '{model}'", err=True)
        sys.exit(1)

    click.echo(f"'{code}'")


@cli.command("list-versions")
@click.option("--channel", type=click.Choice(CHANNEL_CHOICES), default=None,
              help="Update channel (default from config)")
@click.option("--model", default=None, help="Notecard model, e.g. NOTE-WBNA")
@click.option("--hardware-type", default=None, help="Hardware type code, e.g. u5")
@click.pass_context
def list_versions(ctx, channel, model, hardware_type):
    """List firmware versions available for a Notecard."""
    config = ctx.obj["config"]
    channel = channel or config.default_channel.value
    code = _hardware_type(ctx, model, hardware_type)

    async def _list():
        async with _build_resolver(config) as resolver:
            return await resolver.list_versions(channel, code)

    result = asyncio.run(_list())

    if isinstance(result, ResolutionFailure):
        click.echo(f"✗ Could not list firmware versions: {result.message}", err=True)
        sys.exit(1)

    versions = sorted(result, reverse=True)
    click.echo(
        f"Available firmware versions for {channel}: "
        f"{', '.join(str(v) for v in versions)}"
    )


@cli.command()
@click.option("--channel", type=click.Choice(CHANNEL_CHOICES), default=None,
              help="Update channel (default from config)")
@click.option("--model", default=None, help="Notecard model, e.g. NOTE-WBNA")
@click.option("--hardware-type", default=None, help="Hardware type code, e.g. u5")
@click.option("--version", "requested_version", default=LATEST, show_default=True,
              help="Version to install (e.g. 6.2.5.16868)")
@click.option("--current-version", default=None,
              help="Version the Notecard currently runs")
@click.option("--json", "as_json", is_flag=True, help="Print result as JSON")
@click.pass_context
def resolve(ctx, channel, model, hardware_type, requested_version, current_version, as_json):
    """Resolve the firmware download URL for an update."""
    config = ctx.obj["config"]
    channel = channel or config.default_channel.value
    code = _hardware_type(ctx, model, hardware_type)

    try:
        request = ResolutionRequest(
            channel=channel,
            hardware_type=code,
            requested_version=requested_version,
            current_version=current_version
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))

    async def _resolve():
        async with _build_resolver(config) as resolver:
            return await resolver.resolve(request)

    result = asyncio.run(_resolve())

    if as_json:
        click.echo(json.dumps(_result_to_dict(result)))
    elif isinstance(result, SelectedArtifact):
        click.echo(result.url)
    elif isinstance(result, UpToDate):
        click.echo(
            f"✓ Current version {result.current_version} is up to date "
            f"(latest {result.latest_version})"
        )
    else:
        click.echo(f"✗ Could not find firmware: {result.message}", err=True)

    sys.exit(1 if isinstance(result, ResolutionFailure) else 0)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
