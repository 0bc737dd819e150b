from __future__ import annotations

import asyncio
import logging

import typer

from formsync.client import FormsClient
from formsync.config import Settings, ensure_dirs
from formsync.document import share_link
from formsync.errors import FormsyncError
from formsync.responses import build_response_table, to_csv
from formsync.store import SidebarPreference

cli = typer.Typer(add_completion=False)


def run_server(settings: Settings, host: str | None, port: int | None) -> None:
    import uvicorn

    from formsync.app import create_app

    resolved_host = host or settings.host
    resolved_port = port if port is not None else settings.port
    uvicorn.run(create_app(settings), host=resolved_host, port=resolved_port)


@cli.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"settings": settings, "host": host, "port": port}
    if ctx.invoked_subcommand is None:
        run_server(settings, host, port)


@cli.command()
def run(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    base = ctx.obj
    resolved_host = host or base.get("host")
    resolved_port = port if port is not None else base.get("port")
    run_server(base["settings"], resolved_host, resolved_port)


async def _fetch_responses(base_url: str, form_id: str) -> list:
    async with FormsClient(base_url) as client:
        return await client.fetch_responses(form_id)


@cli.command()
def responses(
    ctx: typer.Context,
    form_id: str,
    csv_format: bool = typer.Option(False, "--csv", help="Comma separated output"),
) -> None:
    """Print the submitted responses of a form."""
    settings: Settings = ctx.obj["settings"]
    try:
        items = asyncio.run(_fetch_responses(settings.api_base_url, form_id))
    except FormsyncError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    table = build_response_table(items, is_loading=False)
    if table.empty:
        typer.echo(table.empty_message)
        return
    typer.echo(to_csv(table, delimiter="," if csv_format else "\t"), nl=False)


@cli.command()
def sidebar(
    ctx: typer.Context,
    show: bool | None = typer.Option(None, "--show/--hide", help="Set the sidebar flag"),
    toggle: bool = typer.Option(False, "--toggle", help="Flip the sidebar flag"),
) -> None:
    """Read or change the durable sidebar visibility flag."""
    settings: Settings = ctx.obj["settings"]
    ensure_dirs(settings)
    preference = SidebarPreference(settings.prefs_path)
    if toggle:
        preference.toggle()
    elif show is not None:
        preference.set(show)
    typer.echo("shown" if preference.get() else "hidden")


@cli.command()
def link(ctx: typer.Context, form_id: str) -> None:
    """Print the public fill-out link of a form."""
    settings: Settings = ctx.obj["settings"]
    typer.echo(share_link(settings.public_host, form_id))
