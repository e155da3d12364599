"""Main entry point for the pagedrain application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Setup Logging Early ---
# Use basic config until setup_logging is called with the loaded settings
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# --- Core Layer ---
from pagedrain.core.command_handler import CommandHandler
from pagedrain.domain.models.batch import DrainOptions
from pagedrain.domain.models.common import BackoffPolicy

# --- Infrastructure Layer ---
from pagedrain.infrastructure.cli.display import ConsoleDisplay
from pagedrain.infrastructure.config.settings import (
    get_batch_size, get_config, get_max_concurrent_batches, load_configuration
)
from pagedrain.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, level_from_name, setup_logging
from pagedrain.infrastructure.queue.queue_manager import QueueManager
from pagedrain.infrastructure.resilience.retry import backoff_policy_from_config

# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. Nothing here touches the network:
    the Redis connection behind QueueManager is opened on first use.
    """
    logger.debug("Initializing application dependencies...")
    dependencies: Dict[str, Any] = {}
    try:
        # 1. Configuration, then logging driven by it
        load_configuration()
        setup_logging(
            log_level=level_from_name(get_config('logging.level', 'INFO')),
            log_file=get_config('logging.file'),
            log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        )

        # 2. Infrastructure adapters
        dependencies['ui'] = ConsoleDisplay()
        dependencies['job_queue'] = QueueManager()

        # 3. Command handler
        dependencies['command_handler'] = CommandHandler(
            ui=dependencies['ui'],
            job_queue=dependencies['job_queue'],
        )
        logger.debug("All dependencies initialized successfully.")
        return dependencies

    except Exception as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        print(f"FATAL ERROR during initialization: {e}", file=sys.stderr)
        sys.exit(1)

# --- Get Wired-up Dependencies ---
_dependencies: Dict[str, Any] = create_dependencies()

# --- Typer App Definition ---
app = typer.Typer(
    name="pagedrain",
    help="pagedrain: drain paginated sources with bounded concurrency, retries and job enqueueing.",
    add_completion=False,
)

# --- Helper for Running Async Commands ---
def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Runs an async command handler from a sync Typer command.

    The handler has already reported the error to the user; here it is
    only turned into a non-zero exit code.
    """
    try:
        return asyncio.run(coro)
    except Exception as e:
        logger.debug(f"Command failed: {e}")
        raise typer.Exit(code=1)

# --- CLI Commands ---

@app.command()
def drain(
    source: Annotated[Path, typer.Argument(
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
        help="JSON-lines file to drain, one record per line.")],
    batch_size: Annotated[Optional[int], typer.Option("--batch-size", "-b", min=1,
        help="Records per page. Defaults to 'batch.size' (1000).")] = None,
    max_concurrent: Annotated[Optional[int], typer.Option("--max-concurrent", "-c", min=1,
        help="Pages processed in parallel. Defaults to 'batch.max_concurrent' (3).")] = None,
    max_pages: Annotated[Optional[int], typer.Option("--max-pages", min=1,
        help="Stop after this many pages even if the source is not exhausted.")] = None,
    queue: Annotated[Optional[str], typer.Option("--queue", "-q",
        help="Enqueue each page as a job on this queue.")] = None,
    job: Annotated[Optional[str], typer.Option("--job", "-j",
        help="Dotted path of the worker function for enqueued pages.")] = None,
    retries: Annotated[Optional[int], typer.Option("--retries", min=0,
        help="Retries per page fetch / enqueue. Defaults to 'retry.max_retries' (5).")] = None,
    base_delay: Annotated[Optional[float], typer.Option("--base-delay", min=0.0,
        help="Seconds before the first retry. Defaults to 'retry.base_delay' (0.5).")] = None,
):
    """Drain a JSON-lines file page by page, optionally enqueueing every page."""
    try:
        options = DrainOptions(
            batch_size=batch_size or get_batch_size(),
            max_concurrent_batches=max_concurrent or get_max_concurrent_batches(),
            max_pages=max_pages,
        )
    except ValueError as e:
        # Only reachable through bad config values; CLI options are range-checked
        raise typer.BadParameter(str(e))
    policy = backoff_policy_from_config()
    backoff = BackoffPolicy(
        max_retries=policy["max_retries"] if retries is None else retries,
        base_delay=policy["base_delay"] if base_delay is None else base_delay,
    )
    handler: CommandHandler = _dependencies['command_handler']
    run_async(handler.handle_drain(str(source), options, backoff, queue_name=queue, job_name=job))

@app.command()
def enqueue(
    queue: Annotated[str, typer.Argument(help="Queue name.")],
    job: Annotated[str, typer.Argument(help="Dotted path of the worker function.")],
    payload: Annotated[Optional[str], typer.Option("--payload", "-p",
        help="JSON object passed to the job.")] = None,
):
    """Enqueue a single job on a queue."""
    handler: CommandHandler = _dependencies['command_handler']
    run_async(handler.handle_enqueue(queue, job, payload))

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
