"""Click-based prompts and messages for the lifecycle controller."""

import click

from ..core.lifecycle import ActionChoice, Confirmation, MenuOption


def _pick(message: str, labels: list[str]) -> int | None:
    """Show a numbered list and return the chosen index, or None on abort."""
    click.echo(click.style(f"? {message}", bold=True))
    for number, label in enumerate(labels, start=1):
        click.echo(f"  {number}) {label}")

    try:
        choice = click.prompt(
            "Enter a number", type=click.IntRange(1, len(labels)), default=1
        )
    except click.Abort:
        click.echo()
        return None
    return choice - 1


class ClickPrompter:
    """Asks menu, selection and confirmation questions on the terminal.

    Ctrl-C or end of input at any prompt is reported as a cancellation
    rather than raised.
    """

    def choose_action(self, options: list[MenuOption]) -> ActionChoice | None:
        index = _pick("What would you like to do?", [o.label for o in options])
        return None if index is None else options[index].action

    def select_session(self, message: str, sessions: list[str]) -> str | None:
        index = _pick(message, sessions)
        return None if index is None else sessions[index]

    def confirm(self, message: str, default: bool) -> Confirmation:
        try:
            answer = click.confirm(message, default=default)
        except click.Abort:
            click.echo()
            return Confirmation.CANCELLED
        return Confirmation.CONFIRMED if answer else Confirmation.DECLINED


class ClickNotifier:
    """Prints styled progress messages."""

    def info(self, message: str) -> None:
        click.secho(message, fg="blue")

    def success(self, message: str) -> None:
        click.secho(message, fg="green")

    def warning(self, message: str) -> None:
        click.secho(message, fg="yellow")

    def error(self, message: str) -> None:
        click.secho(message, fg="red", err=True)
