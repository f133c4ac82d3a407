"""CLI interface for swiftly."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import SwiftClient
from .config import Config, SyncSettings, parse_exclude_list, parse_identity
from .exceptions import (
    AuthError,
    ConfigError,
    ContainerError,
    DiscoveryError,
    SwiftlyError,
)
from .output import OutputFormatter
from .utils import container_from_domain

logger = logging.getLogger(__name__)

# Exit status for invalid settings, failed authentication, walk and container
# failures
EXIT_FATAL = 2


def resolve_container(container: Optional[str], domain: Optional[str]) -> str:
    """Pick the target container from --container or --domain.

    Raises:
        ConfigError: If neither is given
    """
    if container:
        return container
    if domain:
        return container_from_domain(domain)
    raise ConfigError("Either 'container' or 'domain' is required")


def build_client(
    cfg: Config,
    identity: Optional[str],
    password: Optional[str],
    endpoint: Optional[str],
    region: Optional[str],
) -> SwiftClient:
    """Create an (unauthenticated) client from CLI values and config.

    Raises:
        ConfigError: If credentials are missing or malformed
    """
    identity = identity or cfg.identity
    password = password or cfg.password
    if not identity or not password:
        raise ConfigError("'identity' and 'password' are required")

    tenant, username = parse_identity(identity)
    return SwiftClient(
        tenant=tenant,
        username=username,
        password=password,
        auth_url=endpoint or cfg.endpoint,
        region=region or cfg.region,
    )


def credential_options(func: Any) -> Any:
    """Attach the options shared by commands that talk to the object store."""
    options = [
        click.option(
            "--identity", "-i", help="Object storage identity as <tenant>:<username>"
        ),
        click.option("--password", "-p", help="Object storage password"),
        click.option("--endpoint", "-e", help="Keystone (auth) endpoint URL"),
        click.option("--region", help="Region of the object-store endpoint"),
        click.option("--container", "-C", help="Target container name"),
        click.option(
            "--domain",
            "-d",
            help="Your domain name, used as container name (e.g. www.example.com)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="swiftly")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """Swiftly - Mirror a local directory into OpenStack Swift object storage."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj.setdefault("config", Config())

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("swiftly").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--identity",
    "-i",
    prompt="Identity (<tenant>:<username>)",
    help="Object storage identity",
)
@click.option(
    "--password",
    "-p",
    prompt=True,
    hide_input=True,
    help="Object storage password",
)
@click.option("--endpoint", "-e", default=None, help="Keystone (auth) endpoint URL")
@click.pass_context
def init(ctx: Any, identity: str, password: str, endpoint: Optional[str]) -> None:
    """Save credentials to ~/.config/swiftly/config."""
    out: OutputFormatter = ctx.obj["out"]
    cfg: Config = ctx.obj["config"]

    try:
        tenant, username = parse_identity(identity)
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(EXIT_FATAL)
        return

    auth_url = endpoint or cfg.endpoint
    out.info("Validating credentials...")
    client = SwiftClient(tenant, username, password, auth_url=auth_url)
    try:
        client.authenticate()
        out.success("✓ Credentials are valid")
    except AuthError as e:
        out.error(f"Credential validation failed: {e}")
        if not click.confirm("Save credentials anyway?", default=False):
            out.warning("Configuration cancelled.")
            ctx.exit(1)
            return
    finally:
        client.close()

    config_path = cfg.save(
        SWIFTLY_IDENTITY=identity,
        SWIFTLY_PASSWORD=password,
        SWIFTLY_ENDPOINT=endpoint,
    )
    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "✓ Configuration saved successfully"),
            ("Config file", str(config_path)),
        ],
    )


@main.command()
@credential_options
@click.pass_context
def ls(
    ctx: Any,
    identity: Optional[str],
    password: Optional[str],
    endpoint: Optional[str],
    region: Optional[str],
    container: Optional[str],
    domain: Optional[str],
) -> None:
    """List the objects stored in a container."""
    out: OutputFormatter = ctx.obj["out"]
    cfg: Config = ctx.obj["config"]

    try:
        target = resolve_container(container, domain)
        client = build_client(cfg, identity, password, endpoint, region)
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(EXIT_FATAL)
        return

    with client:
        try:
            client.authenticate()
            names = sorted(client.list_object_names(target))
        except AuthError as e:
            out.error(f"Authentication failed: {e}")
            ctx.exit(EXIT_FATAL)
            return
        except SwiftlyError as e:
            out.error(f"Problem getting object names: {e}")
            ctx.exit(1)
            return

    if out.json_output:
        out.output_json(names)
        return
    for name in names:
        click.echo(name)


@main.command()
@click.argument("path", type=click.Path(file_okay=True, dir_okay=True))
@credential_options
@click.option(
    "--exclude",
    "-x",
    help="A comma separated list of files or directories to exclude from upload",
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=None,
    help="Number of files uploaded concurrently (default: 4, reduce if "
    "'too many open files' errors occur)",
)
@click.option(
    "--dir-workers",
    type=int,
    default=None,
    help="Maximum number of directory markers checked concurrently "
    "(default: one per directory)",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be synced without syncing"
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 if any object failed to sync",
)
@click.option(
    "--no-website",
    is_flag=True,
    help="Do not configure the container as a public static website",
)
@click.pass_context
def sync(
    ctx: Any,
    path: str,
    identity: Optional[str],
    password: Optional[str],
    endpoint: Optional[str],
    region: Optional[str],
    container: Optional[str],
    domain: Optional[str],
    exclude: Optional[str],
    workers: Optional[int],
    dir_workers: Optional[int],
    dry_run: bool,
    strict: bool,
    no_website: bool,
) -> None:
    """Mirror a local directory into a container.

    PATH: Local directory to sync

    Objects whose content matches the local file are left alone, changed
    and new files are uploaded, and objects without a local counterpart are
    deleted.

    Examples:
        swiftly sync ./public -d www.example.com -i acme:deploy
        swiftly sync ./public -C assets --exclude ./public/drafts
        swiftly sync ./public -d example.com --dry-run
    """
    from .sync import SyncEngine

    out: OutputFormatter = ctx.obj["out"]
    cfg: Config = ctx.obj["config"]

    try:
        target = resolve_container(container, domain)
        client = build_client(cfg, identity, password, endpoint, region)
        settings = SyncSettings(
            local=Path(path),
            container=target,
            exclude=parse_exclude_list(exclude),
            workers=workers if workers is not None else cfg.workers,
            directory_workers=dir_workers,
            dry_run=dry_run,
            website=not no_website,
        )
        if not settings.local.is_dir():
            raise ConfigError(f"Problem locating directory '{path}'")
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(EXIT_FATAL)
        return

    with client:
        try:
            client.authenticate()
        except AuthError as e:
            out.error(f"Authentication failed. Validate your credentials are correct ({e})")
            ctx.exit(EXIT_FATAL)
            return

        out.info(f"Using container: {target}")

        engine = SyncEngine(client, out)
        try:
            report = engine.sync(settings)
        except (ConfigError, DiscoveryError, ContainerError) as e:
            out.error(str(e))
            ctx.exit(EXIT_FATAL)
            return
        except KeyboardInterrupt:
            out.warning("\nSync cancelled by user")
            ctx.exit(130)
            return

    if out.json_output:
        out.output_json(report.to_dict())

    if strict and report.has_errors:
        ctx.exit(1)


if __name__ == "__main__":
    main()
