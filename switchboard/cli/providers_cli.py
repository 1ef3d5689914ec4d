"""Top-level `switchboard providers` command group."""

from __future__ import annotations

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from switchboard.core.config import (
    ConfigManager,
    ModelProviderInfo,
    WireApi,
    built_in_model_providers,
)
from switchboard.core.providers.errors import MissingCredentialError
from switchboard.core.providers.resolver import (
    build_full_url,
    resolve_api_key,
    resolve_custom_headers,
)

console = Console()

_MASK = "***"


def _manager(ctx: click.Context) -> ConfigManager:
    obj = ctx.find_object(ConfigManager)
    if obj is None:
        obj = ConfigManager()
        ctx.obj = obj
    return obj


def _source_label(manager: ConfigManager, key: str) -> str:
    if manager.is_user_defined(key):
        return "user"
    if key in built_in_model_providers():
        return "built-in"
    return "unknown"


def _parse_query_entries(raw_entries: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for raw in raw_entries:
        if "=" not in raw:
            raise click.ClickException(
                f"Invalid --query entry '{raw}'. Expected KEY=VALUE format."
            )
        key, value = raw.split("=", 1)
        key = key.strip()
        if not key:
            raise click.ClickException(f"Invalid --query entry '{raw}'. Empty key is not allowed.")
        parsed[key] = value
    return parsed


def _parse_header_entries(raw_entries: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for raw in raw_entries:
        if ":" not in raw:
            raise click.ClickException(
                f"Invalid --header entry '{raw}'. Use 'Name: Value'."
            )
        key, value = raw.split(":", 1)
        key = key.strip()
        if not key:
            raise click.ClickException(f"Invalid --header entry '{raw}'. Empty header name.")
        parsed[key] = value.strip()
    return parsed


def _credential_status(info: ModelProviderInfo) -> dict[str, Optional[str]]:
    if info.env_key is None:
        return {"status": "not required", "env_key": None, "instructions": None}
    try:
        resolve_api_key(info)
    except MissingCredentialError as exc:
        return {
            "status": "missing",
            "env_key": exc.variable_name,
            "instructions": exc.instructions,
        }
    return {"status": "set", "env_key": info.env_key, "instructions": None}


def _lookup(manager: ConfigManager, key: str) -> ModelProviderInfo:
    try:
        return manager.get_model_provider(key)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0])) from exc


@click.group(
    name="providers",
    invoke_without_command=True,
    help="Inspect and manage model providers.",
)
@click.pass_context
def providers_group(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@providers_group.command(name="list")
@click.option("--json", "json_output", is_flag=True, help="Output machine-readable JSON.")
@click.pass_context
def list_providers(ctx: click.Context, json_output: bool) -> None:
    manager = _manager(ctx)
    selected = manager.get_global_config().model_provider
    providers = manager.get_model_providers()
    records: list[dict[str, Any]] = []
    for key in sorted(providers, key=str.lower):
        info = providers[key]
        records.append(
            {
                "key": key,
                "name": info.name,
                "wire_api": info.wire_api.value,
                "url": build_full_url(info),
                "source": _source_label(manager, key),
                "selected": key == selected,
            }
        )
    if json_output:
        click.echo(json.dumps(records, indent=2, ensure_ascii=False))
        return

    table = Table(title="Model Providers")
    table.add_column("Key", no_wrap=True)
    table.add_column("Name")
    table.add_column("Wire API")
    table.add_column("URL", overflow="fold")
    table.add_column("Source", no_wrap=True)
    for row in records:
        marker = " *" if row["selected"] else ""
        table.add_row(
            escape(row["key"]) + marker,
            escape(row["name"]),
            row["wire_api"],
            escape(row["url"]),
            row["source"],
        )
    console.print(table)


@providers_group.command(name="show")
@click.argument("key")
@click.option("--json", "json_output", is_flag=True, help="Output machine-readable JSON.")
@click.option("--reveal", is_flag=True, help="Show resolved header values instead of masking them.")
@click.pass_context
def show_provider(ctx: click.Context, key: str, json_output: bool, reveal: bool) -> None:
    manager = _manager(ctx)
    info = _lookup(manager, key)
    headers = resolve_custom_headers(info)
    if not reveal:
        headers = {name: _MASK for name in headers}
    payload = {
        "key": key,
        "name": info.name,
        "base_url": info.base_url,
        "wire_api": info.wire_api.value,
        "url": build_full_url(info),
        "source": _source_label(manager, key),
        "credential": _credential_status(info),
        "headers": headers,
    }
    if json_output:
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    credential = payload["credential"]
    console.print(f"\n[bold]{escape(info.name)}[/bold] ({escape(key)}, {payload['source']})\n")
    console.print(f"Wire API: {info.wire_api.value}")
    console.print(f"URL: {escape(payload['url'])}")
    if credential["env_key"]:
        console.print(f"API Key: {credential['status']} (${escape(credential['env_key'])})")
    else:
        console.print(f"API Key: {credential['status']}")
    if credential["instructions"]:
        console.print(f"  [dim]{escape(credential['instructions'])}[/dim]")
    if headers:
        console.print("[bold]Headers:[/bold]")
        for name, value in headers.items():
            console.print(f"  {escape(name)}: {escape(value)}")
    console.print()


@providers_group.command(name="add")
@click.option("--name", "display_name", required=True, help="Display name for the provider.")
@click.option("--base-url", required=True, help="Base URL of the OpenAI-compatible API.")
@click.option("--env-key", default=None, help="Environment variable holding the API key.")
@click.option(
    "--env-key-instructions",
    default=None,
    help="Help text shown when the API key is missing.",
)
@click.option(
    "--wire-api",
    type=click.Choice([member.value for member in WireApi]),
    default=WireApi.CHAT.value,
    show_default=True,
    help="Wire protocol the provider speaks.",
)
@click.option("--query", "query_entries", multiple=True, help="Query parameter KEY=VALUE.")
@click.option(
    "--header",
    "header_entries",
    multiple=True,
    help="Custom header `Name: Value`; values may use ${VAR} placeholders.",
)
@click.option("--overwrite", is_flag=True, help="Overwrite if the provider already exists.")
@click.argument("key")
@click.pass_context
def add_provider(
    ctx: click.Context,
    display_name: str,
    base_url: str,
    env_key: Optional[str],
    env_key_instructions: Optional[str],
    wire_api: str,
    query_entries: tuple[str, ...],
    header_entries: tuple[str, ...],
    overwrite: bool,
    key: str,
) -> None:
    clean_key = key.strip()
    if not clean_key:
        raise click.ClickException("Provider key is required.")
    if " " in clean_key:
        raise click.ClickException("Provider key must not contain spaces.")
    if not display_name.strip():
        raise click.ClickException("Provider name cannot be empty.")

    info = ModelProviderInfo(
        name=display_name.strip(),
        base_url=base_url.strip(),
        env_key=(env_key or "").strip() or None,
        env_key_instructions=env_key_instructions,
        wire_api=WireApi(wire_api),
        query_params=_parse_query_entries(query_entries) or None,
        custom_headers=_parse_header_entries(header_entries) or None,
    )
    manager = _manager(ctx)
    updated = manager.is_user_defined(clean_key)
    try:
        manager.add_model_provider(clean_key, info, overwrite=overwrite)
    except ValueError as exc:
        raise click.ClickException(
            f"{exc} Re-run with --overwrite to replace it."
        ) from exc
    action = "Updated" if updated else "Added"
    click.echo(f"{action} model provider '{clean_key}' in {manager.global_config_path}.")


@providers_group.command(name="remove")
@click.argument("key")
@click.pass_context
def remove_provider(ctx: click.Context, key: str) -> None:
    manager = _manager(ctx)
    try:
        manager.delete_model_provider(key)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0])) from exc
    click.echo(f"Removed model provider '{key}' from {manager.global_config_path}.")


@providers_group.command(name="select")
@click.argument("key")
@click.pass_context
def select_provider(ctx: click.Context, key: str) -> None:
    manager = _manager(ctx)
    try:
        manager.set_model_provider(key)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Selected model provider '{key}'.")


__all__ = ["providers_group"]
