import json
import sys
from pathlib import Path

import click
import httpx

from secure_labs import __version__
from secure_labs.errors import LabError
from secure_labs.file_ops import FileOperations
from secure_labs.resolver import Rejected, resolve
from secure_labs.settings import DEFAULT_PORTS, load_settings
from secure_labs.types import LabName
from secure_labs.web.config import LabConfig, default_base_dir
from secure_labs.web.server import start_lab


@click.group()
@click.version_option(__version__, prog_name="secure-labs")
def cli():
    """Secure Labs - small services for practising web security fixes"""


@cli.command()
@click.argument("lab", type=click.Choice([lab.value for lab in LabName]))
@click.option("--host", default=None, help="Interface to bind (default 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port to listen on")
@click.option("--base-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.option("--insecure-demo", is_flag=True, default=False, help="Mount the deliberately unsafe read route")
@click.option("--settings", "settings_file", type=click.Path(dir_okay=False, path_type=Path), default=None)
def serve(lab, host, port, base_dir, insecure_demo, settings_file):
    """Run one of the labs"""
    config = LabConfig.from_settings(load_settings(settings_file), LabName(lab))
    if host:
        config.host = host
    if port:
        config.port = port
    if base_dir:
        config.base_dir = base_dir
    if insecure_demo:
        config.insecure_demo = True

    if config.insecure_demo and config.lab is LabName.CANONICALIZATION:
        click.echo("⚠️  Insecure demo route /read-no-validate is enabled. Never expose this lab.", err=True)

    click.echo(f"🚀 Starting {lab} lab at http://{config.host}:{config.port}")
    start_lab(config)


@cli.command(name="resolve")
@click.argument("root")
@click.argument("raw")
def resolve_command(root, raw):
    """Show how RAW resolves against ROOT"""
    result = resolve(root, raw)
    if isinstance(result, Rejected):
        click.echo(f"❌ Rejected ({result.reason.value}): {result.message}", err=True)
        sys.exit(1)
    click.echo(str(result.path))


@cli.command(name="setup-sample")
@click.option("--base-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
def setup_sample(base_dir):
    """Create the sample files used by the canonicalization lab"""
    file_ops = FileOperations(base_dir or default_base_dir())
    try:
        file_ops.ensure_base_dir()
        written = file_ops.write_samples()
    except PermissionError:
        click.echo("❌ Permission denied. Please check the base directory permissions.", err=True)
        sys.exit(1)
    except LabError as e:
        click.echo(f"❌ {e.message}", err=True)
        sys.exit(1)

    for path in written:
        click.echo(f"📄 {path}")
    click.echo(f"✅ Sample files ready in {file_ops.base_dir}")


@cli.command()
@click.argument("filename")
@click.option("--host", default="127.0.0.1")
@click.option("--port", type=int, default=DEFAULT_PORTS[LabName.CANONICALIZATION])
@click.option("--insecure", is_flag=True, default=False, help="Probe the unsafe route instead of /read")
def probe(filename, host, port, insecure):
    """Ask a running canonicalization lab to read FILENAME"""
    route = "read-no-validate" if insecure else "read"
    url = f"http://{host}:{port}/{route}"

    try:
        response = httpx.post(url, json={"filename": filename}, timeout=5.0)
    except httpx.ConnectError:
        click.echo(f"❌ Could not connect to {url}. Is the lab running?", err=True)
        sys.exit(1)
    except httpx.RequestError as e:
        click.echo(f"❌ Request failed: {e}", err=True)
        sys.exit(1)

    try:
        data = response.json()
    except ValueError:
        data = {"raw": response.text}

    click.echo(f"HTTP {response.status_code}")
    click.echo(json.dumps(data, indent=2))
    if response.status_code >= 400:
        sys.exit(1)
