"""Lantern CLI entrypoint.

Command-line interface for scheduling and running search index syncs.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from lantern.core.sync.sync_engine import SyncEngine
    from lantern.domain.config import LanternConfig
    from lantern.domain.entities import BulkSyncReport

from lantern.core.errors import (
    LanternCliError,
    bulk_sync_failed_error,
    content_export_missing_error,
    lantern_dir_not_found_error,
)
from lantern.core.progress import progress_context
from lantern.core.repo_utils import find_lantern_root
from lantern.core.sync.scheduler import SyncScheduler
from lantern.domain.exceptions import LanternDomainError
from lantern.ports.repositories import SyncStateError
from lantern.version import __version__

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def handle_cli_errors(command_name: str):
    """Decorator to handle common CLI errors.

    LanternCliError propagates unchanged. Domain and state errors become
    LanternCliError with a hint; anything else is reported as unexpected,
    with a traceback in verbose mode.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except LanternCliError:
                raise
            except LanternDomainError as e:
                raise LanternCliError(e.message, hint=e.hint) from e
            except SyncStateError as e:
                raise LanternCliError(
                    f"Sync state error: {e}",
                    hint="Check that .lantern/ is writable, or run 'lantern init --force'",
                ) from e
            except RuntimeError as e:
                raise LanternCliError(
                    str(e),
                    hint="Run with --verbose for more details",
                ) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise LanternCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def get_lantern_dir() -> Path:
    """Locate the .lantern directory for the current working directory.

    Raises:
        LanternCliError: If no .lantern directory is found.
    """
    root = find_lantern_root()
    if root is None:
        lantern_dir_not_found_error()
    return root / ".lantern"


def _load_config(lantern_dir: Path) -> LanternConfig:
    """Load merged global and local configuration for a .lantern directory."""
    from lantern.adapters.factory import ConfigFactory

    return ConfigFactory().create_config_provider().load(lantern_dir)


def _create_engine(lantern_dir: Path, config: LanternConfig) -> SyncEngine:
    """Create a SyncEngine over the configured content export and index.

    Raises:
        LanternCliError: If the content export does not exist.
    """
    from lantern.adapters.factory import EngineFactory

    export_path = lantern_dir / config.content.export_path
    if not export_path.exists():
        content_export_missing_error(str(export_path))
    return EngineFactory().create_sync_engine(lantern_dir, config)


def _create_state_store(lantern_dir: Path, config: LanternConfig):
    """Create the state store alone, for commands that never touch the index."""
    from lantern.adapters.factory import RepositoryFactory

    return RepositoryFactory().create_state_store(lantern_dir / config.storage.state_db)


@click.group()
@click.version_option(version=__version__, prog_name="lantern")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress non-essential output.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """Lantern - keep a search index in sync with a content store.

    Publishes are indexed as they happen; bulk syncs are scheduled per
    tenant and run in resumable pages.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


@cli.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Reinitialize even if .lantern/ already exists.",
)
@click.pass_context
@handle_cli_errors("init")
def init(ctx: click.Context, force: bool) -> None:
    """Initialize Lantern in the current directory.

    Creates .lantern/ with a default config.toml and the sync state database.
    """
    from lantern.adapters.factory import ConfigFactory
    from lantern.core.config.init_usecase import InitRequest, InitUseCase

    use_case = InitUseCase(db_initializer=ConfigFactory().create_db_initializer())
    response = use_case.execute(InitRequest(root=Path.cwd(), force=force))

    if not response.success:
        hint = (
            "Use 'lantern init --force' to reinitialize"
            if response.already_exists
            else "Check permissions and try again"
        )
        raise LanternCliError(response.error or "Unknown error", hint=hint)

    if ctx.obj.get("quiet", False):
        return

    action = "Reinitialized" if response.was_reinitialized else "Initialized"
    click.echo(f"{action} lantern in {response.lantern_dir}")
    click.echo(f"  Config: {response.config_path}")
    click.echo(f"  State:  {response.db_path}")
    click.echo("\nPlace your content export at .lantern/content.json, then run:")
    click.echo("  lantern schedule && lantern run")


@cli.command()
@click.argument("tenant", type=int, required=False, default=None)
@click.pass_context
@handle_cli_errors("schedule")
def schedule(ctx: click.Context, tenant: int | None) -> None:
    """Schedule a bulk sync for TENANT (default tenant if omitted).

    A tenant that already has a sync scheduled keeps its start time and
    progress.
    """
    lantern_dir = get_lantern_dir()
    config = _load_config(lantern_dir)
    tenant_id = config.sync.default_tenant if tenant is None else tenant

    with _create_state_store(lantern_dir, config) as store:
        scheduled = SyncScheduler(store, config.sync).schedule(tenant_id)

    if scheduled:
        if not ctx.obj.get("quiet", False):
            click.echo(f"Scheduled bulk sync for tenant {tenant_id}")
    elif not ctx.obj.get("quiet", False):
        click.echo(f"Bulk sync for tenant {tenant_id} is already scheduled")


@cli.command()
@click.pass_context
@handle_cli_errors("run")
def run(ctx: click.Context) -> None:
    """Run all scheduled bulk syncs.

    Each tenant advances by the configured number of pages. Progress is
    saved after every item, so an interrupted run resumes where it stopped.
    """
    from lantern.adapters.factory import EngineFactory

    quiet = ctx.obj.get("quiet", False)
    lantern_dir = get_lantern_dir()
    config = _load_config(lantern_dir)
    with _create_engine(lantern_dir, config) as engine:
        gateway = EngineFactory().create_event_gateway(engine)
        with progress_context(quiet_mode=quiet) as progress:
            report = gateway.on_admin_trigger_run_pending_syncs(progress=progress)

    if not quiet:
        _report_bulk_sync(report)

    if report.failed_tenants:
        bulk_sync_failed_error(report.failed_tenants)


def _report_bulk_sync(report: BulkSyncReport) -> None:
    """Print one line per tenant that had a scheduled sync."""
    if not report.tenants:
        click.echo("No bulk syncs scheduled")
        return

    for tenant in report.tenants:
        if tenant.error:
            state = click.style(f"failed ({tenant.error})", fg="red")
        elif tenant.completed:
            state = click.style("complete", fg="green")
        else:
            state = click.style("in progress", fg="yellow")
        click.echo(
            f"Tenant {tenant.tenant_id}: {tenant.processed} processed, "
            f"{tenant.indexed} indexed, {tenant.failed} failed - {state}"
        )


@cli.command()
@click.argument("tenant", type=int)
@click.pass_context
@handle_cli_errors("cancel")
def cancel(ctx: click.Context, tenant: int) -> None:
    """Cancel the scheduled bulk sync for TENANT, discarding its progress."""
    lantern_dir = get_lantern_dir()
    config = _load_config(lantern_dir)
    with _create_state_store(lantern_dir, config) as store:
        cancelled = SyncScheduler(store, config.sync).cancel(tenant)

    if cancelled:
        if not ctx.obj.get("quiet", False):
            click.echo(f"Cancelled bulk sync for tenant {tenant}")
    else:
        raise LanternCliError(
            f"No bulk sync scheduled for tenant {tenant}",
            hint="Run 'lantern status' to list scheduled syncs",
        )


@cli.command()
@click.pass_context
@handle_cli_errors("status")
def status(ctx: click.Context) -> None:
    """Show scheduled bulk syncs and indexed item counts per tenant."""
    lantern_dir = get_lantern_dir()
    config = _load_config(lantern_dir)
    store = _create_state_store(lantern_dir, config)

    with store:
        cursors = store.list_sync_statuses()
        tenant_ids = sorted(set(cursors) | set(config.tenants))

        click.echo(f"Lantern {__version__} ({lantern_dir})")
        if not tenant_ids:
            click.echo("No tenants configured")
            return

        for tenant_id in tenant_ids:
            tenant_config = config.get_tenant_config(tenant_id)
            types = ", ".join(sorted(tenant_config.synced_post_types)) or "-"
            cursor = cursors.get(tenant_id)
            if cursor is not None and cursor.is_scheduled:
                sync_state = (
                    f"scheduled {cursor.start_time.isoformat()}, "
                    f"{cursor.posts_processed} processed"
                )
            else:
                sync_state = "idle"
            click.echo(
                f"Tenant {tenant_id}: {store.count_marked(tenant_id)} indexed, "
                f"types [{types}], bulk sync {sync_state}"
            )

        if config.get_tenant_config(0).cross_tenant_search_active:
            click.echo("Cross-tenant search is active: writes go to the global index")


if __name__ == "__main__":
    cli()
