#!/usr/bin/env python3
"""
Command-line interface for AE Script Runner
"""

import asyncio
from pathlib import Path
from typing import Optional, Sequence, Tuple

import click
import yaml

from .core.config import ConfigManager
from .core.env_config import config as env_config
from .core.error_handling import RunnerError
from .core.host import FileDocument, UntitledDocument
from .core.logging_config import setup_logging
from .core.models import InstallationOption
from .core.service import ScriptRunnerService
from .templates import RunnerTemplates


class ClickPicker:
    """Picker that asks on the terminal"""

    def pick(self, options: Sequence[InstallationOption], placeholder: str) -> Optional[InstallationOption]:
        click.echo(f"\n{placeholder}")
        for index, option in enumerate(options, start=1):
            line = f"  {index}) {option.label}"
            if option.description:
                line += f" - {option.description}"
            click.echo(line)
            if option.detail:
                click.echo(f"       {option.detail}")
        click.echo("  0) Cancel")

        choice = click.prompt("Selection", type=click.IntRange(0, len(options)), default=0)
        if choice == 0:
            return None
        return options[choice - 1]

    def choose_application(self, prompt: str) -> Optional[str]:
        path = click.prompt(f"{prompt} (path to the .app bundle)", default="", show_default=False)
        return path.strip() or None


def _service(ctx: click.Context) -> ScriptRunnerService:
    return ctx.obj["service"]


def _run_async(coro):
    try:
        return asyncio.run(coro)
    except RunnerError as e:
        raise click.ClickException(str(e) or RunnerTemplates.ERRORS["run_failed"]) from e


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Configuration file")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--json-logs", is_flag=True, help="Log as JSON lines")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str], json_logs: bool):
    """Send ExtendScript files to Adobe After Effects"""
    try:
        manager = ConfigManager(config_path)
    except RunnerError as e:
        raise click.ClickException(str(e)) from e

    log_settings = manager.logging_settings
    setup_logging(
        log_level=log_level or log_settings.log_level,
        log_file=Path(log_settings.log_file).expanduser() if log_settings.log_file else None,
        use_json=True if json_logs or log_settings.use_json else None,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = manager
    ctx.obj["service"] = ScriptRunnerService(manager)


@cli.command()
@click.argument("script", required=False, type=click.Path(dir_okay=False))
@click.option("--stdin", "from_stdin", is_flag=True, help="Read an unsaved script from standard input")
@click.option(
    "-w", "--workspace", "workspaces", multiple=True, type=click.Path(file_okay=False),
    help="Workspace folder (repeatable, the first one is used for relative paths)",
)
@click.pass_context
def run(ctx: click.Context, script: Optional[str], from_stdin: bool, workspaces: Tuple[str, ...]):
    """Run SCRIPT (or the configured execute_file) in After Effects"""
    service = _service(ctx)

    if from_stdin:
        document = UntitledDocument(click.get_text_stream("stdin").read())
    elif script:
        document = FileDocument(script)
    else:
        document = None

    folders = [str(Path(w).expanduser().resolve()) for w in workspaces] or None

    async def _run():
        try:
            return await service.run(document, folders)
        finally:
            await service.drain()

    outcome = _run_async(_run())
    click.echo(outcome.message)


@cli.command()
@click.pass_context
def detect(ctx: click.Context):
    """List detected After Effects installations"""
    installations = _run_async(_service(ctx).list_installations())

    if not installations:
        click.echo("No After Effects installations detected.")
        return

    for option in installations:
        click.echo(f"{option.label}  {option.description}  ({option.value})")


@cli.command("choose-version")
@click.pass_context
def choose_version(ctx: click.Context):
    """Choose which After Effects installation is targeted (macOS)"""
    message = _run_async(_service(ctx).choose_version(ClickPicker()))
    if message:
        click.echo(message)


@cli.command("set-app")
@click.argument("app_path", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def set_app(ctx: click.Context, app_path: str):
    """Target the After Effects bundle at APP_PATH (macOS)"""
    click.echo(_run_async(_service(ctx).configure_from_app_path(app_path)))


@cli.command("show-config")
@click.pass_context
def show_config(ctx: click.Context):
    """Print the effective configuration"""
    manager: ConfigManager = ctx.obj["config"]
    click.echo(f"# {manager.config_path}")
    click.echo(yaml.dump(manager.app_config.model_dump(), default_flow_style=False, sort_keys=False))

    validation = env_config.validate()
    for name, warning in validation["warnings"].items():
        click.echo(f"# warning: {name}: {warning}", err=True)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
