"""CLI interface for http-timeout-retry"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click
import requests
import yaml

from http_timeout_retry.infrastructure.config.config_manager import ConfigManager
from http_timeout_retry.infrastructure.http_client import PendingRequest

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


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


def parse_headers(values: Tuple[str, ...]) -> dict:
    """Parse ``Name: value`` pairs given on the command line

    Raises:
        click.BadParameter: If a header has no colon
    """
    headers = {}
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = header_value.strip()
    return headers


def _load_config(ctx: click.Context) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"))
    except Exception as e:
        _die(f"Failed to load configuration: {e}", verbose=ctx.obj.get("verbose", False), exc=e)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .http-retry.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """http-retry - HTTP requests with timeout retries"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command("config")
@click.pass_context
def show_config(ctx):
    """Print the effective retry configuration."""
    config_manager = _load_config(ctx)
    data = {"retry": config_manager.get("retry")}
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())


@cli.command()
@click.argument("method", type=click.Choice(HTTP_METHODS, case_sensitive=False))
@click.argument("url", type=str)
@click.option("--attempts", type=int, help="Total attempts. Overrides config.")
@click.option("--delay", type=int, help="Delay between attempts in milliseconds. Overrides config.")
@click.option("--log-retries/--no-log-retries", default=None, help="Log each retry. Overrides config.")
@click.option(
    "--allowed-method",
    "allowed_methods",
    multiple=True,
    help="HTTP method eligible for retry (repeatable). Overrides config.",
)
@click.option("--header", "-H", "headers", multiple=True, help="Request header 'Name: value' (repeatable)")
@click.option("--data", "-d", type=str, help="Request body")
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout in seconds")
@click.pass_context
def request(
    ctx,
    method: str,
    url: str,
    attempts: Optional[int],
    delay: Optional[int],
    log_retries: Optional[bool],
    allowed_methods: Tuple[str, ...],
    headers: Tuple[str, ...],
    data: Optional[str],
    timeout: float,
):
    """Send a request, retrying connection failures.

    METHOD: HTTP method
    URL: Absolute request URL
    """
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)

    client = PendingRequest(
        headers=parse_headers(headers),
        timeout=timeout,
        settings=config_manager.get_retry_config(),
    ).with_timeout_retry(
        attempts=attempts,
        delay=delay,
        logging_enabled=log_retries,
        allowed_methods=list(allowed_methods) or None,
    )

    try:
        response = client.send(method, url, data=data)
    except requests.RequestException as e:
        _die(f"Request failed: {e}", verbose=verbose, exc=e)

    click.echo(f"HTTP {response.status_code} {response.reason or ''}".rstrip())
    if response.text:
        click.echo(response.text)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
