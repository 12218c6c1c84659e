from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import click
import requests

from . import __version__
from .client import AuthenticatedClient, SalesforceClient
from .config import SFConfig
from .env_loader import load_env_files
from .exceptions import MissingCredentialsError
from .logging_config import configure_logging

_logger = logging.getLogger(__name__)

_CREDENTIALS_HINT = (
    "Set these environment variables (or create a .env file), e.g.:\n"
    "  SF_CONSUMER_KEY=...          # Connected App Consumer Key\n"
    "  SF_CONSUMER_SECRET=...       # Connected App Consumer Secret\n"
    "  SF_USERNAME=...\n"
    "  SF_PASSWORD=...              # password + security token if required\n"
    "  SF_PRODUCTION=true           # optional; default is the sandbox login\n"
    "  SF_API_VERSION=v42.0         # optional\n\n"
    "Or reuse an earlier session with SF_ACCESS_TOKEN and SF_INSTANCE_URL."
)


def _connect() -> AuthenticatedClient:
    """Build a client from the environment, turning credential errors into CLI errors."""
    try:
        with _http_errors():
            return SalesforceClient(SFConfig.from_env()).connect()
    except MissingCredentialsError as e:
        needed = ", ".join(e.missing)
        raise click.ClickException(f"Missing Salesforce credentials: {needed}\n\n{_CREDENTIALS_HINT}") from e


@contextmanager
def _http_errors() -> Iterator[None]:
    try:
        yield
    except requests.HTTPError as e:
        resp = e.response
        if resp is None:
            raise click.ClickException(str(e)) from e
        raise click.ClickException(f"Salesforce returned HTTP {resp.status_code}: {resp.text}") from e
    except requests.RequestException as e:
        raise click.ClickException(f"Request failed: {e}") from e


def _echo_json(data: Any, pretty: bool) -> None:
    click.echo(json.dumps(data, indent=2 if pretty else None))


pretty_option = click.option("--pretty", is_flag=True, help="Pretty-print JSON.")


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.version_option(__version__, "--version", prog_name="sfrest")
@click.option(
    "-v",
    "--verbose",
    "loglevel",
    flag_value=logging.INFO,
    default=None,
    help="Enable INFO logs.",
)
@click.option(
    "-vv",
    "--very-verbose",
    "loglevel",
    flag_value=logging.DEBUG,
    help="Enable DEBUG logs.",
)
@click.pass_context
def cli(ctx: click.Context, loglevel: Optional[int]) -> None:
    """Salesforce REST client. Use subcommands like 'login' or 'query'."""
    configure_logging(loglevel)
    load_env_files()
    _logger.debug("CLI start, version=%s", __version__)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command("login")
def cmd_login() -> None:
    """Authenticate and print the session to export for later commands."""
    sf = _connect()
    token = sf.access_token
    click.echo("✅  Connected to Salesforce.")
    click.echo(f"Instance URL: {sf.instance_url}")
    click.echo(f"API Version:  {sf.api_version}")
    click.echo(f"Token preview: {token[:10]}...{token[-6:]}")
    click.echo("")
    click.echo("# Reuse this session without logging in again:")
    click.echo(f"export SF_ACCESS_TOKEN={token}")
    click.echo(f"export SF_INSTANCE_URL={sf.instance_url}")


@cli.command("query")
@click.argument("soql")
@pretty_option
def cmd_query(soql: str, pretty: bool) -> None:
    """Run a SOQL query (first batch of records only)."""
    sf = _connect()
    with _http_errors():
        data = sf.query(soql)
    _echo_json(data, pretty)


@cli.command("search")
@click.argument("sosl")
@pretty_option
def cmd_search(sosl: str, pretty: bool) -> None:
    """Run a SOSL search."""
    sf = _connect()
    with _http_errors():
        data = sf.search(sosl)
    _echo_json(data, pretty)


@cli.command("get")
@click.argument("sobject")
@click.argument("record_id")
@click.option("--fields", default="", help="Comma-separated field names to return.")
@pretty_option
def cmd_get(sobject: str, record_id: str, fields: str, pretty: bool) -> None:
    """Fetch one record by Id."""
    field_list = [f.strip() for f in fields.split(",") if f.strip()]
    sf = _connect()
    with _http_errors():
        data = sf.get(sobject, record_id, field_list)
    _echo_json(data, pretty)


@cli.command("job-status")
@click.argument("job_id", required=False)
@pretty_option
def cmd_job_status(job_id: Optional[str], pretty: bool) -> None:
    """Show one bulk ingest job, or all jobs when JOB_ID is omitted."""
    sf = _connect()
    with _http_errors():
        data = sf.get_job_status(job_id) if job_id else sf.get_all_job_status()
    _echo_json(data, pretty)


@cli.command("limits")
@pretty_option
def cmd_limits(pretty: bool) -> None:
    """Show org API limits."""
    sf = _connect()
    with _http_errors():
        data = sf.limits()
    _echo_json(data, pretty)
