#!/usr/bin/env python3
"""
CLI tool for the node configuration reconciler.

Acts as a minimal host orchestrator: reads declared resources from a
YAML/JSON file, drives the resource plugins and keeps a local state file.
"""

import asyncio
import json
import logging

import click
import yaml
from tabulate import tabulate

from client import FleetAPIClient, check_ok_response
from config import LoggingConfig, get_config
from errors import NodeConfigError
from plugins.base import OPERATION_PHASES
from plugins.registry import get_registry, register_builtin_resources
from plugins.resources.node_configuration.wire import NodeConfigurationList
from state import StateStore

logger = logging.getLogger(__name__)

DEFAULT_KIND = "node_configuration"
DEFAULT_STATE_FILE = "nodeconf.state.json"


def build_client() -> FleetAPIClient:
    """Create the API client from environment configuration."""
    try:
        return FleetAPIClient.from_config(get_config().api)
    except ValueError as e:
        raise click.ClickException(str(e))


def get_plugin(kind: str, client: FleetAPIClient):
    registry = get_registry()
    if not registry.has_resource_plugin(kind):
        register_builtin_resources()
    try:
        return registry.get_resource_plugin(kind, client)
    except ValueError as e:
        raise click.ClickException(str(e))


def run_operation(operation: str, coro):
    """Run one lifecycle call under its configured timeout."""
    timeout = get_config().timeouts.for_operation(operation)
    logger.debug(f"Resource phase: {OPERATION_PHASES[operation].value}")

    async def _bounded():
        return await asyncio.wait_for(coro, timeout=timeout)

    try:
        return asyncio.run(_bounded())
    except asyncio.TimeoutError:
        raise click.ClickException(f"{operation} timed out after {timeout}s")
    except NodeConfigError as e:
        raise click.ClickException(str(e)) from e


def load_declared(filename: str) -> dict:
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    data = data or {}
    if not isinstance(data, dict):
        raise click.ClickException(
            f"{filename} must contain a mapping of resource address to resource"
        )
    return data


@click.group()
@click.option(
    "--state",
    "state_path",
    default=DEFAULT_STATE_FILE,
    show_default=True,
    help="Path of the local state file",
)
@click.pass_context
def cli(ctx, state_path):
    """Node configuration CLI - declare node configurations and converge them"""
    logging_config = LoggingConfig.from_env()
    logging.basicConfig(level=logging_config.level, format=logging_config.format)
    ctx.obj = {"state_path": state_path}


def _open_state(ctx) -> StateStore:
    try:
        return StateStore(ctx.obj["state_path"]).load()
    except ValueError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def apply(ctx, filename):
    """Converge all resources declared in a YAML/JSON file"""
    documents = load_declared(filename)
    store = _open_state(ctx)
    client = build_client()

    # Parse everything first so bad input never leaves partial remote state
    declared = {}
    for address, document in documents.items():
        document = dict(document or {})
        kind = document.pop("kind", DEFAULT_KIND)
        plugin = get_plugin(kind, client)
        try:
            declared[address] = (plugin, plugin.parse_declared(document))
        except NodeConfigError as e:
            raise click.ClickException(f"{address}: {e}")

    created = updated = deleted = 0
    for address in sorted(declared):
        plugin, desired = declared[address]
        existing = store.get(address)

        result = None
        if existing is not None:
            prior = plugin.load_state(existing[1])
            result = run_operation("read", plugin.read(prior))
            if result.removed:
                click.echo(f"{address}: no longer exists remotely, re-creating")
            else:
                result = run_operation("update", plugin.update(result.state, desired))
                if result.removed:
                    click.echo(f"{address}: disappeared during update, re-creating")
                elif result.changed:
                    updated += 1

        if result is None or result.removed:
            result = _create(store, address, plugin, desired)
            created += 1

        store.put(address, plugin.kind, plugin.to_document(result.state))
        store.save()

    for address in list(store.addresses()):
        if address in declared:
            continue
        kind, document = store.get(address)
        plugin = get_plugin(kind, client)
        run_operation("delete", plugin.delete(plugin.load_state(document)))
        store.remove(address)
        store.save()
        deleted += 1

    click.echo(
        f"Apply complete! Resources: {created} created, "
        f"{updated} updated, {deleted} destroyed."
    )


def _create(store: StateStore, address: str, plugin, desired):
    """Create a resource, recording its id even when the follow-up read fails."""
    try:
        return run_operation("create", plugin.create(desired))
    except click.ClickException as e:
        partial = getattr(e.__cause__, "state", None)
        if partial is not None:
            store.put(address, plugin.kind, plugin.to_document(partial))
            store.save()
        raise


@cli.command()
@click.pass_context
def refresh(ctx):
    """Refresh tracked resources from the remote API"""
    store = _open_state(ctx)
    client = build_client()

    for address in list(store.addresses()):
        kind, document = store.get(address)
        plugin = get_plugin(kind, client)
        result = run_operation("read", plugin.read(plugin.load_state(document)))
        if result.removed:
            click.echo(f"{address}: removed from state ({result.message})")
            store.remove(address)
        else:
            store.put(address, kind, plugin.to_document(result.state))
    store.save()
    click.echo(f"Refreshed {len(store)} resource(s)")


@cli.command(name="import")
@click.argument("address")
@click.argument("key")
@click.option("--kind", default=DEFAULT_KIND, show_default=True)
@click.pass_context
def import_(ctx, address, key, kind):
    """Import an existing resource, KEY is <cluster_id>/<name or id>"""
    store = _open_state(ctx)
    if address in store:
        raise click.ClickException(f"{address} is already managed")

    plugin = get_plugin(kind, build_client())
    result = run_operation("import", plugin.import_state(key))
    if result.removed:
        raise click.ClickException(f"Cannot import non-existent remote object: {key}")

    store.put(address, kind, plugin.to_document(result.state))
    store.save()
    click.echo(f"Imported {address} (id: {result.state.id})")


@cli.command()
@click.argument("address")
@click.confirmation_option(prompt="Are you sure you want to destroy this resource?")
@click.pass_context
def destroy(ctx, address):
    """Destroy a single managed resource"""
    store = _open_state(ctx)
    entry = store.get(address)
    if entry is None:
        raise click.ClickException(f"{address} is not managed")

    kind, document = entry
    plugin = get_plugin(kind, build_client())
    result = run_operation("delete", plugin.delete(plugin.load_state(document)))
    store.remove(address)
    store.save()
    click.echo(f"{address}: {result.message}")


@cli.command()
@click.argument("address")
@click.option("--output", "-o", type=click.Choice(["json", "yaml"]), default="yaml")
@click.pass_context
def show(ctx, address, output):
    """Show the last-known state of a resource"""
    entry = _open_state(ctx).get(address)
    if entry is None:
        raise click.ClickException(f"{address} is not managed")

    kind, document = entry
    data = {"kind": kind, **document}
    if output == "yaml":
        click.echo(yaml.dump(data, default_flow_style=False))
    else:
        click.echo(json.dumps(data, indent=2))


@cli.command(name="list")
@click.argument("cluster_id")
def list_(cluster_id):
    """List node configurations of a cluster"""
    client = build_client()

    async def _list():
        return check_ok_response(await client.list_configurations(cluster_id))

    response = run_operation("read", _list())
    listing = NodeConfigurationList.model_validate(response.data or {})

    headers = ["ID", "Name", "Version", "Default", "Provider"]
    rows = []
    for cfg in listing.items or []:
        provider = next(
            (k for k in ("eks", "aks", "kops", "gke") if getattr(cfg, k) is not None),
            "-",
        )
        rows.append(
            [cfg.id, cfg.name, cfg.version, "✓" if cfg.is_default else "", provider]
        )

    click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


if __name__ == "__main__":
    cli()
