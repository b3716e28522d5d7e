"""
Command-line interface for the Cloud Files SDK.

Credentials are taken from --username/--api-key or the CLOUDFILES_USERNAME
and CLOUDFILES_API_KEY environment variables; they are never saved.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Dict, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, DownloadColumn

from .client import CloudFilesClient
from .config import ClientSettings, load_settings
from .exceptions import CloudFilesError, AuthenticationError, NotFoundError, ValidationError
from .utils import format_file_size, guess_mime_type


# Initialize Rich console
console = Console()


class CLIContext:
    """CLI context object to share state between commands."""

    def __init__(self, settings: ClientSettings, debug: bool = False):
        self.settings = settings
        self.debug = debug
        self.client: Optional[CloudFilesClient] = None

    def get_client(self) -> CloudFilesClient:
        """Get authenticated client."""
        if self.client is None:
            if not self.settings.has_credentials:
                raise AuthenticationError(
                    "Credentials not configured. Use --username/--api-key or set "
                    "CLOUDFILES_USERNAME and CLOUDFILES_API_KEY."
                )

            client = CloudFilesClient(
                api_version=self.settings.api_version,
                auth_host=self.settings.auth_host,
                ca_bundle=self.settings.ca_bundle,
                timeout=self.settings.timeout,
                debug=self.debug,
            )
            client.authenticate(
                self.settings.username,
                self.settings.api_key,
                account=self.settings.account,
                host=self.settings.auth_host if self.settings.account else None,
            )
            self.client = client

        return self.client


def parse_metadata(pairs: Tuple[str, ...]) -> Dict[str, str]:
    """Turn KEY=VALUE arguments into a metadata dict."""
    metadata = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValidationError(f"Metadata must be given as KEY=VALUE, got {pair!r}", field="metadata")
        metadata[key] = value
    return metadata


def fail(message: str, error: Exception):
    console.print(f"❌ {message}: {error}")
    sys.exit(1)


@click.group()
@click.option('--username', '-u', help='Account username (or CLOUDFILES_USERNAME)')
@click.option('--api-key', '-k', help='API key (or CLOUDFILES_API_KEY)')
@click.option('--account', help='Account name for legacy authentication')
@click.option('--auth-host', help='Authentication host')
@click.option('--ca-bundle', type=click.Path(), help='CA bundle for TLS verification')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='Settings file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, username, api_key, account, auth_host, ca_bundle, config_file, debug):
    """Cloud Files CLI - manage containers, objects and CDN publishing."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    try:
        settings = load_settings(
            config_file=Path(config_file) if config_file else None,
            username=username,
            api_key=api_key,
            account=account,
            auth_host=auth_host,
            ca_bundle=ca_bundle,
        )
    except CloudFilesError as e:
        fail("Invalid configuration", e)

    ctx.obj = CLIContext(settings, debug=debug)
    ctx.call_on_close(lambda: ctx.obj.client and ctx.obj.client.close())


@cli.command()
@click.pass_obj
def account(obj: CLIContext):
    """Show account usage."""
    try:
        usage = obj.get_client().head_account()
    except CloudFilesError as e:
        fail("Failed to get account info", e)

    table = Table(title="Account")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Containers", str(usage.container_count))
    table.add_row("Bytes used", format_file_size(usage.bytes_used))
    table.add_row("Storage URL", obj.client.storage_url)
    table.add_row("CDN URL", obj.client.cdn_management_url or "-")
    console.print(table)


@cli.command()
@click.option('--limit', '-l', default=0, help='Maximum number of containers (0 for all)')
@click.option('--marker', '-m', help='List containers after this name')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_obj
def containers(obj: CLIContext, limit, marker, output_json):
    """List containers."""
    try:
        items = obj.get_client().list_containers_info(limit=limit, marker=marker)
    except CloudFilesError as e:
        fail("Failed to list containers", e)

    if output_json:
        console.print(json.dumps([item.to_dict() for item in items], indent=2))
        return
    if not items:
        console.print("No containers found.")
        return

    table = Table(title="Containers")
    table.add_column("Name", style="green")
    table.add_column("Objects", style="cyan")
    table.add_column("Size", style="yellow")
    for item in items:
        table.add_row(item.name, str(item.object_count), format_file_size(item.bytes_used))
    console.print(table)


@cli.command()
@click.argument('name')
@click.pass_obj
def create(obj: CLIContext, name):
    """Create a container."""
    try:
        created = obj.get_client().create_container(name)
    except CloudFilesError as e:
        fail("Create failed", e)
    console.print(f"✅ Created: {name}" if created else f"Container already exists: {name}")


@cli.command()
@click.argument('name')
@click.confirmation_option(prompt='Are you sure you want to delete this container?')
@click.pass_obj
def delete(obj: CLIContext, name):
    """Delete an empty container."""
    try:
        obj.get_client().delete_container(name)
    except CloudFilesError as e:
        fail("Delete failed", e)
    console.print(f"✅ Deleted: {name}")


@cli.command()
@click.argument('name')
@click.pass_obj
def info(obj: CLIContext, name):
    """Show object count and size of a container."""
    try:
        container = obj.get_client().head_container(name)
    except CloudFilesError as e:
        fail("Failed to get container info", e)
    console.print(
        f"{container.name}: {container.object_count} objects, {format_file_size(container.bytes_used)}"
    )


@cli.command(name='ls')
@click.argument('container')
@click.option('--prefix', '-p', help='Only objects starting with this prefix')
@click.option('--path', help='Only objects directly below this pseudo-directory')
@click.option('--limit', '-l', default=0, help='Maximum number of objects (0 for all)')
@click.option('--marker', '-m', help='List objects after this name')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_obj
def list_objects(obj: CLIContext, container, prefix, path, limit, marker, output_json):
    """List objects in a container."""
    try:
        items = obj.get_client().list_objects_info(
            container, limit=limit, marker=marker, prefix=prefix, path=path
        )
    except CloudFilesError as e:
        fail("Failed to list objects", e)

    if output_json:
        console.print(json.dumps([item.to_dict() for item in items], indent=2, default=str))
        return
    if not items:
        console.print("No objects found.")
        return

    table = Table(title=f"Objects in {container}")
    table.add_column("Name", style="green")
    table.add_column("Size", style="yellow")
    table.add_column("Type", style="blue")
    table.add_column("Modified", style="magenta")
    for item in items:
        table.add_row(
            item.name,
            format_file_size(item.content_length or 0),
            item.content_type or "-",
            item.last_modified.strftime('%Y-%m-%d %H:%M') if item.last_modified else 'Unknown',
        )
    console.print(table)


@cli.command()
@click.argument('container')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--name', help='Object name (defaults to the file name)')
@click.option('--content-type', help='MIME type (guessed from the name by default)')
@click.option('--meta', multiple=True, help='Metadata as KEY=VALUE (repeatable)')
@click.pass_obj
def upload(obj: CLIContext, container, file, name, content_type, meta):
    """Upload a file as an object."""
    file_path = Path(file)
    name = name or file_path.name
    size = file_path.stat().st_size

    try:
        metadata = parse_metadata(meta)
        client = obj.get_client()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Uploading {name}", total=size)
            client.set_read_progress_callback(lambda count: progress.advance(task, count))

            with open(file_path, "rb") as f:
                etag = client.put_object(
                    container,
                    name,
                    f,
                    metadata=metadata,
                    content_type=content_type or guess_mime_type(name),
                    content_length=size,
                )
        client.set_read_progress_callback(None)
    except CloudFilesError as e:
        fail("Upload failed", e)

    console.print(f"✅ Uploaded: {container}/{name} (ETag: {etag})")


@cli.command()
@click.argument('container')
@click.argument('name')
@click.option('--output', '-o', type=click.Path(), help='Output file path')
@click.pass_obj
def download(obj: CLIContext, container, name, output):
    """Download an object to a file."""
    local_path = Path(output) if output else Path(Path(name).name)
    if local_path.is_dir():
        local_path = local_path / Path(name).name

    try:
        client = obj.get_client()
        head = client.head_object(container, name)
        if not head.exists:
            raise NotFoundError(f"Object not found: {container}/{name}")
        size = head.content_length

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Downloading {name}", total=size)
            client.set_write_progress_callback(lambda count: progress.advance(task, count))

            with open(local_path, "wb") as f:
                written = client.get_object_to_stream(container, name, f)
        client.set_write_progress_callback(None)
    except CloudFilesError as e:
        fail("Download failed", e)

    console.print(f"✅ Downloaded: {local_path} ({format_file_size(written)})")


@cli.command()
@click.argument('container')
@click.argument('name')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_obj
def stat(obj: CLIContext, container, name, output_json):
    """Show object attributes and metadata."""
    try:
        item = obj.get_client().head_object(container, name)
    except CloudFilesError as e:
        fail("Failed to get object info", e)

    if not item.exists:
        console.print(f"❌ Object not found: {container}/{name}")
        sys.exit(1)

    if output_json:
        console.print(json.dumps(item.to_dict(), indent=2, default=str))
        return

    table = Table(title=f"{container}/{name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Size", format_file_size(item.content_length or 0))
    table.add_row("Content-Type", item.content_type or "-")
    table.add_row("ETag", item.etag or "-")
    table.add_row("Last-Modified", str(item.last_modified) if item.last_modified else "Unknown")
    for key, value in sorted(item.metadata.items()):
        table.add_row(f"Meta {key}", value)
    console.print(table)


@cli.command()
@click.argument('container')
@click.argument('name')
@click.argument('pairs', nargs=-1, required=True)
@click.pass_obj
def meta(obj: CLIContext, container, name, pairs):
    """Replace object metadata with KEY=VALUE pairs."""
    try:
        obj.get_client().update_object_metadata(container, name, parse_metadata(pairs))
    except CloudFilesError as e:
        fail("Metadata update failed", e)
    console.print(f"✅ Metadata updated: {container}/{name}")


@cli.command()
@click.argument('container')
@click.argument('name')
@click.pass_obj
def rm(obj: CLIContext, container, name):
    """Delete an object."""
    try:
        obj.get_client().delete_object(container, name)
    except CloudFilesError as e:
        fail("Delete failed", e)
    console.print(f"✅ Deleted: {container}/{name}")


@cli.group()
def cdn():
    """Publish containers on the CDN."""


@cdn.command(name='list')
@click.pass_obj
def cdn_list(obj: CLIContext):
    """List CDN-enabled containers."""
    try:
        names = obj.get_client().list_cdn_containers()
    except CloudFilesError as e:
        fail("Failed to list CDN containers", e)

    if not names:
        console.print("No CDN containers found.")
        return
    for name in names:
        console.print(name)


@cdn.command(name='enable')
@click.argument('name')
@click.option('--ttl', default=86400, show_default=True, help='Cache TTL in seconds')
@click.pass_obj
def cdn_enable(obj: CLIContext, name, ttl):
    """Publish a container."""
    try:
        uri = obj.get_client().enable_cdn(name, ttl=ttl)
    except CloudFilesError as e:
        fail("CDN enable failed", e)
    console.print(f"✅ Published: {name} -> {uri}")


@cdn.command(name='disable')
@click.argument('name')
@click.pass_obj
def cdn_disable(obj: CLIContext, name):
    """Stop publishing a container."""
    try:
        obj.get_client().disable_cdn(name)
    except CloudFilesError as e:
        fail("CDN disable failed", e)
    console.print(f"✅ Unpublished: {name}")


@cdn.command(name='info')
@click.argument('name')
@click.pass_obj
def cdn_info(obj: CLIContext, name):
    """Show the CDN state of a container."""
    try:
        settings = obj.get_client().head_cdn_container(name)
    except CloudFilesError as e:
        fail("Failed to get CDN info", e)

    table = Table(title=f"CDN: {name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Enabled", {True: "Yes", False: "No"}.get(settings.enabled, "Unknown"))
    table.add_row("URI", settings.uri or "-")
    table.add_row("TTL", str(settings.ttl) if settings.ttl is not None else "-")
    console.print(table)


if __name__ == '__main__':
    cli()
