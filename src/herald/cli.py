"""CLI interface for Herald"""

import json
import logging
import random
from pathlib import Path
from typing import List, Optional

import click

from herald.application.publisher import EventPublisher
from herald.domain.models.event import EventData
from herald.domain.policies.retry_policy import RetryPolicy
from herald.infrastructure.config.config_manager import ConfigManager
from herald.infrastructure.transport.factory import TransportSenderFactory

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def read_events(file_path: Path) -> List[EventData]:
    """Read events from a JSON lines file

    Each non-empty line is either an object with a ``body`` (and optional
    ``properties``) or any other JSON value, which is used as the body.

    Args:
        file_path: Path to the JSON lines file

    Returns:
        List of events in file order
    """
    events = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                document = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{file_path}:{line_number}: invalid JSON: {e}") from e

            if isinstance(document, dict) and "body" in document:
                body = document["body"]
                if not isinstance(body, str):
                    body = json.dumps(body)
                events.append(EventData(body=body, properties=document.get("properties") or {}))
            else:
                events.append(EventData(body=json.dumps(document)))
    return events


def _create_sender(config_manager: ConfigManager, transport_override: Optional[str], url_override: Optional[str]):
    transport_config = config_manager.get_transport_config()
    kind = transport_override or transport_config.kind
    sender_config = {
        "url": url_override or transport_config.url,
        "headers": dict(transport_config.headers),
    }
    logger.info(f"Using transport: {kind}")
    return TransportSenderFactory.create(kind, sender_config)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .herald.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """Herald - reliable batched event publishing"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("events_file", type=click.Path(exists=True, path_type=Path))
@click.option("--partition-key", type=str, help="Partition key for every batch. Overrides config.")
@click.option(
    "--transport",
    type=click.Choice(["mock", "http"], case_sensitive=False),
    help="Transport to send batches with. Overrides config.",
)
@click.option("--url", type=str, help="Endpoint for the http transport. Overrides config.")
@click.pass_context
def publish(ctx, events_file: Path, partition_key: str, transport: str, url: str):
    """Publish events from a JSON lines file.

    EVENTS_FILE: One event per line
    """
    verbose = ctx.obj.get("verbose", False)

    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
        try:
            sender = _create_sender(config_manager, transport, url)
        except ValueError as e:
            _die(str(e), verbose=verbose, exc=e)

        publisher = EventPublisher(
            sender,
            retry_policy=RetryPolicy(config_manager.get_retry_options()),
            batch_options=config_manager.get_batch_options(),
        )
        events = read_events(events_file)
        logger.info(f"Publishing {len(events)} events from {events_file}")
        stats = publisher.publish(events, partition_key=partition_key)

        click.echo("=" * 80)
        click.echo("Publish Statistics")
        click.echo("=" * 80)
        click.echo(f"Events published: {stats['total_events']}")
        click.echo(f"Batches sent: {stats['batches_sent']}")
        click.echo(f"Bytes sent: {stats['bytes_sent']}")

    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)


@cli.command()
@click.option("--attempts", type=click.IntRange(min=1), default=10, show_default=True, help="Attempts to show")
@click.option("--seed", type=int, help="Seed for the jitter random source")
@click.pass_context
def backoff(ctx, attempts: int, seed: Optional[int]):
    """Show the retry delays the configured policy produces for a timeout."""
    verbose = ctx.obj.get("verbose", False)

    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
        options = config_manager.get_retry_options()
        policy = RetryPolicy(options, rng=random.Random(seed))
        schedule = policy.retry_schedule(TimeoutError("simulated timeout"), attempts)

        click.echo(
            f"Mode: {options.mode.value}, delay: {options.delay}s, maximum delay: {options.maximum_delay}s, "
            f"try timeout: {policy.calculate_try_timeout(0)}s"
        )
        for attempt, delay in enumerate(schedule):
            click.echo(f"Retry {attempt + 1}: {delay:.3f}s")
        if len(schedule) < attempts:
            click.echo(f"No retry after {len(schedule)} retries")

    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
