"""
CLI entrypoint.

doctor: print effective engine settings.
validate: offline check of the config file and the registered locator chains.
run: authenticate, apply across pages, print the report.
Exit codes: 0 completed, 1 fatal run error, 2 configuration error.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..actions.sites.instahyre import INSTAHYRE
from ..core import registry
from ..core.config import RunConfig, load_config
from ..core.controller.runner import Runner
from ..core.errors import ConfigError, FatalRunError
from ..core.logs import configure_logging
from ..core.settings import settings
from ..io.driver import browser_session
from ..io.playwright_driver import PlaywrightDriver
from ..reporting.schemas import RunReport
from ..reporting.writer import build_report, render_text, write_report

app = typer.Typer(help="autoapply CLI")
console = Console()
logger = logging.getLogger(__name__)


def _register_actions() -> None:
    try:
        import autoapply.actions.impl  # noqa: F401
    except Exception as e:  # noqa: BLE001
        typer.secho(f"failed to register locator chains: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)


def _load(config: Path) -> RunConfig:
    try:
        return load_config(config)
    except ConfigError as e:
        typer.secho(f"[config] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm CLI is usable."""
    console.print("[bold green]autoapply[/] environment")
    console.print(f"- config:   {settings.config_path}")
    console.print(f"- channel:  {settings.browser_channel or 'bundled chromium'}")
    console.print(f"- auth:     {settings.auth_timeout_ms}ms, ceiling {settings.auth_ceiling_ms}ms")
    console.print(f"- artifacts: {settings.artifacts_dir or '-'}")
    console.print(f"- log level: {settings.log_level}")


@app.command("validate")
def validate(
    config: Path = typer.Option(None, "--config", "-c", help="Path to config JSON"),
) -> None:
    """
    Offline validation: load the config file and list every registered
    candidate chain in preference order. Exits non-zero on config errors.
    """
    cfg = _load(config or settings.config_path)
    _register_actions()

    table = Table(title="Locator Chains", show_header=True, header_style="bold")
    table.add_column("action")
    table.add_column("#", justify="right", style="dim")
    table.add_column("candidate")
    table.add_column("selector")
    table.add_column("techniques")

    for action, chain in registry.list_chains().items():
        for i, cand in enumerate(chain, start=1):
            table.add_row(
                action.value if i == 1 else "",
                str(i),
                cand.name,
                cand.matcher.to_selector(),
                ", ".join(t.value for t in cand.techniques),
            )

    console.print(table)
    s = cfg.settings
    typer.secho(
        f"[validate] config OK (max_pages={s.max_pages}, headless={s.headless})",
        fg=typer.colors.GREEN,
    )


@app.command("run")
def run(
    config: Path = typer.Option(None, "--config", "-c", help="Path to config JSON"),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Override the config file's headless flag"
    ),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1, help="Override page cap"),
    artifacts_dir: Optional[Path] = typer.Option(
        None, "--artifacts-dir", help="Where to save failure screenshots"
    ),
    report_dir: Optional[Path] = typer.Option(
        None, "--report-dir", help="Also write this run's report as JSON + CSV"
    ),
) -> None:
    """
    Authenticate, apply to every listed item page by page, then print the report.
    Per-item failures only show up in the report; the exit code reflects
    completed (0) versus fatal (1/2).
    """
    configure_logging(settings.log_level, console=console)
    cfg = _load(config or settings.config_path)
    _register_actions()

    overrides = {}
    if headless is not None:
        overrides["headless"] = headless
    if max_pages is not None:
        overrides["max_pages"] = max_pages
    if overrides:
        cfg = cfg.model_copy(update={"settings": cfg.settings.model_copy(update=overrides)})

    async def _run() -> RunReport:
        driver = PlaywrightDriver(
            headless=cfg.settings.headless,
            slow_mo_ms=cfg.settings.interaction_delay_ms,
            channel=settings.browser_channel,
            user_agent=settings.user_agent,
        )
        async with browser_session(driver) as ctx:
            runner = Runner(
                driver, ctx, config=cfg, site=INSTAHYRE, settings=settings, artifacts_dir=artifacts_dir
            )
            ledger = await runner.run()
            return build_report(
                INSTAHYRE.name, ledger.entries, pages_visited=runner.state.pages_visited
            )

    try:
        report = asyncio.run(_run())
    except FatalRunError as e:
        logger.error("Fatal error: %s", e)
        raise typer.Exit(code=2 if isinstance(e, ConfigError) else 1)

    console.print(render_text(report))
    if report_dir:
        json_path, csv_path = write_report(report, report_dir)
        console.print(f"[bold green]Report written[/]: {json_path}  |  {csv_path}")
    typer.secho("[run] completed", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
