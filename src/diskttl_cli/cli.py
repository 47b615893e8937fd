from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import NoReturn

import typer

from diskttl import DiskTTLError, EntryStore, StoreConfig, load_config
from diskttl.schemas import utc_now
from diskttl_cli.durations import format_duration, parse_duration

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

ALMOST_EXPIRED_WINDOW = timedelta(minutes=5)

app = typer.Typer(help="diskttl: on-disk key-value cache with per-entry expiry")


@dataclass(slots=True)
class _CliState:
    cache_dir: Path
    default_ttl: timedelta
    clean_workers: int


@app.callback()
def configure(
    ctx: typer.Context,
    cache_dir: Path | None = typer.Option(
        None,
        "--cache-dir",
        envvar="DISKTTL_CACHE_DIR",
        help="Cache directory (defaults to the config value, ~/.cache/diskttl).",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Optional JSON or YAML config file.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level: DEBUG, INFO, WARNING or ERROR.",
    ),
) -> None:
    """Shared options for every command."""
    try:
        logging.getLogger().setLevel(log_level.upper())
    except ValueError as exc:
        raise typer.BadParameter(f"unknown log level: {log_level}") from exc

    config = StoreConfig()
    if config_path is not None:
        try:
            config = load_config(config_path)
        except ValueError as exc:
            _fail(exc)

    ctx.obj = _CliState(
        cache_dir=cache_dir if cache_dir is not None else config.directory_path,
        default_ttl=timedelta(seconds=config.default_ttl_seconds),
        clean_workers=config.clean_workers,
    )


@app.command("set")
def set_value(
    ctx: typer.Context,
    key: str = typer.Option(..., "--key", "-k", help="Key to store the value."),
    value: str = typer.Option(..., "--val", "-v", help="Value to store."),
    duration: str | None = typer.Option(
        None,
        "--duration",
        "-d",
        help="How long to keep the value, e.g. 1h, 30m, 90s (default from config).",
    ),
) -> None:
    """Set a value in the cache."""
    state = _state(ctx)
    ttl = state.default_ttl
    if duration is not None:
        try:
            ttl = parse_duration(duration)
        except ValueError as exc:
            _fail(exc)

    store = _open_store(state)
    try:
        store.set(key, value.encode("utf-8"), ttl)
    except DiskTTLError as exc:
        _fail(exc)
    typer.echo(f"Set {key}={value} for {format_duration(ttl)}")


@app.command("get")
def get_value(
    ctx: typer.Context,
    key: str = typer.Option(..., "--key", "-k", help="Key to retrieve the value."),
) -> None:
    """Get a value from the cache."""
    store = _open_store(_state(ctx))
    try:
        result = store.get(key)
    except DiskTTLError as exc:
        _fail(exc)
    typer.echo(f"{key}={result.decode('utf-8', errors='replace')}")


@app.command("list")
def list_keys(ctx: typer.Context) -> None:
    """List the keys in the cache with their expiry times."""
    store = _open_store(_state(ctx))
    try:
        entries = store.list_entries()
    except DiskTTLError as exc:
        _fail(exc)

    if not entries:
        typer.echo("No entries found")
        return

    now = utc_now()
    for entry in entries:
        typer.echo(f"{_render_expiry(entry.expiry, now)} {entry.key}")


@app.command("remove")
def remove_value(
    ctx: typer.Context,
    key: str = typer.Option(..., "--key", "-k", help="Key to remove."),
) -> None:
    """Remove one entry from the cache."""
    store = _open_store(_state(ctx))
    try:
        store.remove(key)
    except DiskTTLError as exc:
        _fail(exc)
    typer.echo(f"Removed {key}")


@app.command("flush")
def flush_cache(ctx: typer.Context) -> None:
    """Delete every entry, keeping the cache directory."""
    store = _open_store(_state(ctx))
    try:
        removed = store.flush()
    except DiskTTLError as exc:
        _fail(exc)
    typer.echo(f"Flushed {removed} entries")


@app.command("clean")
def clean_cache(ctx: typer.Context) -> None:
    """Delete expired entries only."""
    store = _open_store(_state(ctx))
    try:
        removed = store.clean()
    except DiskTTLError as exc:
        _fail(exc)
    typer.echo(f"Cleaned {removed} expired entries")


@app.command("purge")
def purge_cache(ctx: typer.Context) -> None:
    """Delete the cache directory and everything in it."""
    store = _open_store(_state(ctx))
    try:
        store.delete()
    except DiskTTLError as exc:
        _fail(exc)
    typer.echo(f"Deleted {store.directory}")


def _state(ctx: typer.Context) -> _CliState:
    state = ctx.obj
    if not isinstance(state, _CliState):
        raise RuntimeError("CLI state was not initialised by the app callback")
    return state


def _open_store(state: _CliState) -> EntryStore:
    try:
        return EntryStore(state.cache_dir, max_workers=state.clean_workers)
    except DiskTTLError as exc:
        _fail(exc)


def _fail(exc: Exception) -> NoReturn:
    typer.echo(str(exc), err=True)
    raise typer.Exit(code=1) from exc


def _render_expiry(expiry: datetime, now: datetime) -> str:
    try:
        local = expiry.astimezone()
    except (OverflowError, OSError):
        # The zero expiry west of UTC falls before year 1; show it in UTC.
        local = expiry
    text = local.replace(tzinfo=None).isoformat(sep=" ", timespec="seconds")
    if now > expiry:
        return typer.style(text, fg=typer.colors.RED)
    if expiry - now < ALMOST_EXPIRED_WINDOW:
        return typer.style(text, fg=typer.colors.YELLOW)
    return typer.style(text, fg=typer.colors.GREEN)


def main() -> None:
    """CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
