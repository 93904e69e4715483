"""Main CLI entry point for tmuxdev."""

from pathlib import Path

import click

from .. import __version__
from ..config import LaunchMode, TmuxdevConfig, load_config
from ..core.lifecycle import LifecycleController, SessionSnapshot
from ..core.resolver import EnvironmentResolver
from ..tmux import TmuxService
from ..utils.logging import ConfigurationError, LogContext, get_logger, setup_logging
from .prompts import ClickNotifier, ClickPrompter
from .utils import CliError, error_handler

logger = get_logger(__name__, LogContext.CLI)

# Short forms accepted for each command
COMMAND_ALIASES = {
    "s": "start",
    "a": "attach",
    "m": "menu",
    "h": "help",
}


class UnknownCommandError(click.UsageError):
    """Raised for a command name that is neither a command nor an alias."""

    exit_code = 1


class AliasedGroup(click.Group):
    """Group that resolves single-letter aliases and rejects unknown commands.

    Command resolution happens before the group callback runs, so an unknown
    command exits without loading configuration or touching tmux.
    """

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        cmd_name = args[0]
        if not cmd_name.startswith("-") and self.get_command(ctx, cmd_name) is None:
            raise UnknownCommandError(f"Unknown command: {cmd_name}", ctx=ctx)
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest


def build_controller(settings: TmuxdevConfig) -> LifecycleController:
    """Wire the resolver, tmux adapter and terminal prompts together."""
    return LifecycleController(
        resolver=EnvironmentResolver(fallback_name=settings.fallback_name),
        registry=TmuxService(settings),
        prompter=ClickPrompter(),
        notifier=ClickNotifier(),
        dev_command=settings.dev_command,
    )


def _controller(ctx: click.Context) -> LifecycleController:
    return build_controller(ctx.obj["config"])


def render_help(snapshot: SessionSnapshot) -> None:
    """Print usage, tmux controls and the state of the current session."""
    click.echo(click.style("\ntmuxdev - Tmux session manager for development", fg="blue", bold=True))
    click.echo(
        click.style(
            "  Automatically manages tmux sessions using folder and branch names",
            fg="bright_black",
        )
    )

    click.echo(click.style("\nUsage:", fg="yellow"))
    usage = [
        ("tmuxdev", "Start or attach to the session for current directory"),
        ("tmuxdev start|s", "Start and attach to session for current directory"),
        ("tmuxdev attach|a", "Attach to existing session (offers to start it)"),
        ("tmuxdev menu|m", "Interactive mode with menu"),
        ("tmuxdev help|h", "Show this help message"),
    ]
    for command, description in usage:
        click.echo(f"  {command:<21}" + click.style(description, fg="bright_black"))

    click.echo(click.style("\nOptions:", fg="yellow"))
    options = [
        ("-c, --config PATH", "Configuration file"),
        ("--dev-command TEXT", "Command started in new sessions"),
        ("--launch-mode MODE", "initial-command or send-keys"),
        ("-v, --verbose", "Echo tmux commands and enable debug logging"),
        ("--log-level LEVEL", "Logging level"),
        ("--version", "Show the version and exit"),
    ]
    for option, description in options:
        click.echo(f"  {option:<21}" + click.style(description, fg="bright_black"))

    click.echo(click.style("\nQuick Examples:", fg="yellow"))
    click.echo(click.style("  # Quick start and attach", fg="bright_black"))
    click.echo("  $ tmuxdev s")
    click.echo(click.style("  # Attach to existing session", fg="bright_black"))
    click.echo("  $ tmuxdev a")

    click.echo(click.style("\nTmux Controls:", fg="yellow"))
    controls = [
        ("Ctrl+B then D", "Detach from session"),
        ("Ctrl+B then [", "Enter scroll/copy mode"),
        ("Ctrl+B then %", "Split pane vertically"),
        ('Ctrl+B then "', "Split pane horizontally"),
    ]
    for keys, description in controls:
        click.echo(f"  {keys:<21}" + click.style(description, fg="bright_black"))

    click.echo(click.style("\nSession Info:", fg="yellow"))
    click.echo("  Current directory: " + click.style(snapshot.folder, fg="cyan"))
    click.echo("  Session name:      " + click.style(snapshot.identifier, fg="cyan"))
    exists = (
        click.style("Yes", fg="green") if snapshot.exists else click.style("No", fg="red")
    )
    click.echo("  Session exists:    " + exists)


@click.group(
    cls=AliasedGroup,
    invoke_without_command=True,
    add_help_option=False,
)
@click.version_option(version=__version__, prog_name="tmuxdev")
@click.option("--help", "-h", "show_help", is_flag=True, help="Show help and exit")
@click.option("--config", "-c", help="Configuration file path")
@click.option("--dev-command", help="Override dev_command setting")
@click.option(
    "--launch-mode",
    type=click.Choice([mode.value for mode in LaunchMode]),
    help="Override launch_mode setting",
)
@click.option("--verbose", "-v", is_flag=True, help="Echo tmux commands and log debug output")
@click.option("--log-level", help="Override log_level setting")
@click.pass_context
@error_handler
def main(
    ctx: click.Context,
    show_help: bool,
    config: str | None,
    dev_command: str | None,
    launch_mode: str | None,
    verbose: bool,
    log_level: str | None,
) -> None:
    """Tmux session manager for development servers.

    Names a tmux session after the current folder and git branch, and
    starts, attaches to, or kills it. Without a command, starts the session
    for the current directory or attaches to it if it is already running.
    """
    ctx.ensure_object(dict)

    cli_overrides = {
        "dev_command": dev_command,
        "launch_mode": launch_mode,
        "verbose": True if verbose else None,
        "log_level": log_level,
    }

    wants_help = show_help or ctx.invoked_subcommand == "help"

    try:
        settings = load_config(config, cli_overrides)
    except ConfigurationError as e:
        if not wants_help:
            raise CliError(e.message)
        # Help always renders; show it with defaults
        click.echo(click.style(f"Warning: {e.message}", fg="yellow"), err=True)
        settings = TmuxdevConfig()

    setup_logging(
        log_level="DEBUG" if settings.verbose else settings.log_level,
        log_file=Path(settings.log_file).expanduser() if settings.log_file else None,
    )
    ctx.obj["config"] = settings
    logger.debug(
        "Configuration loaded",
        dev_command=settings.dev_command,
        launch_mode=settings.launch_mode.value,
    )

    if show_help:
        ctx.invoke(help_command)
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        ctx.invoke(start)


@main.command()
@click.pass_context
@error_handler
def start(ctx: click.Context) -> None:
    """Start and attach to the session for the current directory."""
    _controller(ctx).start()


@main.command()
@click.pass_context
@error_handler
def attach(ctx: click.Context) -> None:
    """Attach to the session for the current directory, offering to start it."""
    _controller(ctx).attach_only()


@main.command()
@click.pass_context
@error_handler
def menu(ctx: click.Context) -> None:
    """Choose an action from an interactive menu."""
    _controller(ctx).menu()


@main.command("help")
@click.pass_context
@error_handler
def help_command(ctx: click.Context) -> None:
    """Show usage and the state of the current session."""
    render_help(_controller(ctx).snapshot())


if __name__ == "__main__":
    main()
