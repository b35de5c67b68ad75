"""Main entry point for the localhub-cache CLI.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import logging
from typing import Any, Dict, Optional

import typer
from typing_extensions import Annotated

from localhub_cache.core.command_handler import CommandHandler
from localhub_cache.core.registry import build_cache_registry
from localhub_cache.infrastructure.cli.display import ConsoleDisplay
from localhub_cache.infrastructure.config.settings import get_cache_settings, load_configuration
from localhub_cache.infrastructure.monitoring.logger_setup import configure_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(log_level: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root.
    """
    # 1. Load Configuration First
    load_configuration()
    configure_logging(log_level)

    # 2. Cache components (sweeper off: a CLI invocation is short-lived)
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['registry'] = build_cache_registry(get_cache_settings(), start_maintenance=False)

    # 3. Command Handler
    dependencies['command_handler'] = CommandHandler(
        registry=dependencies['registry'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="localhub-cache",
    help="Inspect and manage the LocalHub tiered cache (memory, session and persistent tiers).",
    add_completion=False,
)

def _handler(ctx: typer.Context) -> CommandHandler:
    return ctx.obj['command_handler']

def _finish(ok: bool) -> None:
    if not ok:
        raise typer.Exit(code=1)

@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", "-l", help="Logging level (debug, info, warning, error).")
    ] = None,
):
    """Builds the cache registry shared by the invoked command."""
    dependencies = create_dependencies(log_level)
    ctx.obj = dependencies
    ctx.call_on_close(dependencies['registry'].close)

@app.command()
def stats(ctx: typer.Context):
    """Show statistics for every cache tier."""
    _finish(_handler(ctx).handle_stats())

@app.command(name="get")
def get_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Exact cache key.")],
):
    """Look up a key (memory, then session, then persistent tier)."""
    _finish(_handler(ctx).handle_get(key))

@app.command(name="set")
def set_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Exact cache key.")],
    value: Annotated[str, typer.Argument(help="Value as JSON text.")],
    ttl: Annotated[Optional[float], typer.Option("--ttl", "-t", help="Time-to-live in seconds.")] = None,
    persistent: Annotated[bool, typer.Option("--persistent", "-p", help="Store in the persistent tier instead of the session tier.")] = False,
):
    """Store a JSON value in the memory tier and one slow tier."""
    _finish(_handler(ctx).handle_set(key, value, ttl=ttl, persistent=persistent))

@app.command()
def delete(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Exact cache key.")],
):
    """Remove a key from all tiers."""
    _finish(_handler(ctx).handle_delete(key))

@app.command()
def invalidate(
    ctx: typer.Context,
    pattern: Annotated[str, typer.Argument(help="Glob pattern, e.g. 'search:*'.")],
):
    """Remove every key matching a glob pattern from all tiers."""
    _finish(_handler(ctx).handle_invalidate(pattern))

@app.command()
def sweep(ctx: typer.Context):
    """Purge expired entries from the session and persistent tiers."""
    _finish(_handler(ctx).handle_sweep())

@app.command(name="clear-cache")
def clear_cache_command(
    ctx: typer.Context,
    level: Annotated[str, typer.Option(help="Level ('memory', 'session', 'persistent', 'all').")] = 'all',
):
    """Clears the cache."""
    _finish(_handler(ctx).handle_clear_cache(level))

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
