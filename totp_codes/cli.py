"""Click CLI printing the current codes of every configured token."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import NoReturn

import click
from dotenv import load_dotenv

from .batch import redact_url, run_batch, run_items
from .config import Settings, TokenConfig, load_settings, load_token_config
from .errors import ConfigReadError, ErrorKind, OtpError
from .formatting import codes_to_json, format_codes, format_failure, items_to_json
from .models import OtpMode
from .secrets import load_token_config_from_secret
from .url_parser import parse_credential_url

load_dotenv()

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.NO_CREDENTIALS_CONFIGURED: 25,
    ErrorKind.INVALID_CONFIG: 26,
    ErrorKind.CONFIG_SYNTAX_ERROR: 27,
    ErrorKind.INSECURE_CONFIG: 28,
}


def exit_code_for(error: OtpError) -> int:
    """Map an error to the process exit status."""
    if isinstance(error, ConfigReadError):
        return error.errno or EXIT_FAILURE
    return EXIT_CODES.get(error.kind, EXIT_FAILURE)


def _fail(error: OtpError) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    sys.exit(exit_code_for(error))


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (defaults to TOTP_CODES_LOG_LEVEL or WARNING)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Print one-time codes for otpauth:// tokens."""
    try:
        settings = load_settings()
    except OtpError as e:
        _fail(e)
    _configure_logging(log_level or settings.log_level)
    ctx.obj = settings


@cli.command("show")
@click.argument("config_path", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--secret-name",
    default=None,
    help="Read the token list from this AWS Secrets Manager secret instead of a file",
)
@click.option("--at", "at", type=float, default=None, help="Unix time to compute codes for (defaults to now)")
@click.option(
    "--keep-going/--fail-fast",
    default=None,
    help="Report failing tokens and still print the others (default: fail fast)",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output JSON instead of text",
)
@click.pass_obj
def show_cmd(
    settings: Settings,
    config_path: str | None,
    secret_name: str | None,
    at: float | None,
    keep_going: bool | None,
    output_json: bool,
) -> None:
    """Print the current code of every token in CONFIG_PATH."""
    try:
        config = _load_config(settings, config_path, secret_name)
    except OtpError as e:
        _fail(e)

    now = at if at is not None else datetime.now(tz=timezone.utc)
    if keep_going is None:
        keep_going = settings.keep_going
    if not keep_going:
        try:
            codes = run_batch(config.tokens, now, max_workers=settings.max_workers)
        except OtpError as e:
            _fail(e)
        click.echo(codes_to_json(codes) if output_json else format_codes(codes))
        return

    try:
        items = run_items(config.tokens, now, max_workers=settings.max_workers)
    except OtpError as e:
        _fail(e)

    failed = [item for item in items if not item.ok]
    if output_json:
        click.echo(items_to_json(items))
    else:
        ok_codes = [item.code for item in items if item.ok]
        if ok_codes:
            click.echo(format_codes(ok_codes))
        for item in failed:
            click.echo(f"Error: {format_failure(item)}", err=True)
    if failed:
        logger.info("%s of %s token(s) failed", len(failed), len(items))
        sys.exit(EXIT_FAILURE)


def _load_config(settings: Settings, config_path: str | None, secret_name: str | None) -> TokenConfig:
    if secret_name:
        return load_token_config_from_secret(secret_name, settings.secrets_region)
    path = config_path or settings.config_path
    logger.debug("Reading tokens from %s", path)
    return load_token_config(path, strict_permissions=settings.strict_permissions)


@cli.command("inspect")
@click.argument("url")
def inspect_cmd(url: str) -> None:
    """Show the parameters of a provisioning URL (never the secret)."""
    try:
        credential = parse_credential_url(url)
    except OtpError as e:
        logger.debug("Failed to parse %s", redact_url(url))
        _fail(e)

    click.echo(f"label:     {credential.label}")
    click.echo(f"account:   {credential.account or '-'}")
    click.echo(f"mode:      {credential.mode.value}")
    click.echo(f"algorithm: {credential.algorithm.value}")
    click.echo(f"digits:    {credential.digits}")
    if credential.mode is OtpMode.TOTP:
        click.echo(f"period:    {credential.period}s")
    else:
        click.echo(f"counter:   {credential.counter}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
