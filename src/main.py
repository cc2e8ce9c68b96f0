from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Optional, TypeVar
from urllib.parse import urlsplit, urlunsplit

import typer
import uvicorn

from src.api import create_app
from src.config import Settings, get_settings
from src.infrastructure.db_factory import (
    MongoClientManager,
    ensure_indexes,
    get_client,
    get_users_collection,
    ping,
)
from src.operations import BatchLoader, BulkDeleter, PaginationReader, UserCollection, UserGenerator
from src.utils.logging import configure_logging

app = typer.Typer(help="Random Users service CLI.")

T = TypeVar("T")


def _masked_uri(uri: str) -> str:
    parts = urlsplit(uri)
    if parts.password is None:
        return uri
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


def _run_with_collection(settings: Settings, action: Callable[[UserCollection], Awaitable[T]]) -> T:
    """
    Connect, run `action` against the users collection, and close the client.
    """

    async def _runner() -> T:
        client = get_client(settings)
        try:
            await ping(client)
            collection = get_users_collection(client, settings)
            await ensure_indexes(collection)
            return await action(collection)
        finally:
            await MongoClientManager().close()

    return asyncio.run(_runner())


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={_masked_uri(settings.mongodb_uri)} collection={settings.mongodb_collection} | "
        f"populate={settings.populate_total_records} batch={settings.populate_batch_size} "
        f"concurrency={settings.populate_concurrency} | page={settings.page_size} "
        f"delete_chunk={settings.delete_chunk_size} pause={settings.delete_pause_seconds}s"
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """
    Run the HTTP service.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    bind_host = host or settings.app_host
    bind_port = port or settings.app_port
    typer.echo(f"Server is running on http://{bind_host}:{bind_port}")
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port, log_config=None)


@app.command()
def populate(
    total: Optional[int] = typer.Option(None, "--total", "-t", min=1, help="Records to generate."),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b", min=1, help="Records per batch."),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", min=1, help="Batches in flight at once."
    ),
) -> None:
    """
    Generate random users and bulk-insert them.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    loader_kwargs = {
        "total_records": total or settings.populate_total_records,
        "batch_size": batch_size or settings.populate_batch_size,
        "concurrency": concurrency or settings.populate_concurrency,
    }

    async def _populate(collection: UserCollection):
        loader = BatchLoader(collection, generator_factory=lambda: UserGenerator.from_settings(settings))
        return await loader.populate(**loader_kwargs)

    _echo_json(_run_with_collection(settings, _populate))


@app.command()
def users(page: int = typer.Option(1, "--page", "-p", min=1, help="1-based page number.")) -> None:
    """
    Print one page of users as JSON.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    async def _list(collection: UserCollection):
        return await PaginationReader(collection).list_users(page=page, page_size=settings.page_size)

    page_users = _run_with_collection(settings, _list)
    if not page_users:
        typer.echo("No users found", err=True)
        raise typer.Exit(code=1)
    _echo_json([user.model_dump(by_alias=True) for user in page_users])


@app.command("delete-all")
def delete_all(
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Users deleted per chunk."),
) -> None:
    """
    Delete every user in throttled chunks.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    async def _delete(collection: UserCollection):
        return await BulkDeleter(collection).delete_all(
            chunk_size=chunk_size or settings.delete_chunk_size,
            pause_seconds=settings.delete_pause_seconds,
        )

    _echo_json(_run_with_collection(settings, _delete))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
