"""Integration tests for CLI workflows.

These drive the real command group, resolver, tmux adapter and terminal
prompts. Only the libtmux server and the ``tmux attach-session`` process
are replaced.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from libtmux.exc import LibTmuxException

from tmuxdev.cli.main import main


class _Sessions(list):
    """List of session doubles with libtmux's ``get`` lookup."""

    def get(self, default=None, **kwargs):
        for session in self:
            if all(getattr(session, k) == v for k, v in kwargs.items()):
                return session
        return default


class InMemoryServer:
    """Stand-in for ``libtmux.Server`` that keeps sessions in memory."""

    def __init__(self, *names: str):
        self.live = list(names)
        self.commands: dict[str, str | None] = {}
        self.panes: dict[str, MagicMock] = {}

    def has_session(self, name):
        return name in self.live

    @property
    def sessions(self):
        result = _Sessions()
        for name in self.live:
            session = MagicMock(session_name=name)
            session.active_window.active_pane = self.panes.setdefault(name, MagicMock())
            result.append(session)
        return result

    def new_session(self, session_name, attach, start_directory, window_command):
        if session_name in self.live:
            raise LibTmuxException(f"duplicate session: {session_name}")
        self.live.append(session_name)
        self.commands[session_name] = window_command

    def kill_session(self, target):
        name = target.removeprefix("=")
        if name not in self.live:
            raise LibTmuxException(f"can't find session: {name}")
        self.live.remove(name)


@pytest.fixture
def server():
    return InMemoryServer()


@pytest.fixture
def attach_calls():
    """Record tmux attach invocations instead of running them."""
    with patch("tmuxdev.tmux.service.subprocess.run") as mock_run:
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        yield mock_run


@pytest.fixture
def session_name():
    """Identifier for the working directory, which is not a git checkout."""
    return Path.cwd().name


@pytest.fixture(autouse=True)
def tmux_server(server):
    with patch("tmuxdev.tmux.service.libtmux.Server", return_value=server):
        yield server


def attached_to(attach_calls) -> list[str]:
    return [c.args[0][3].removeprefix("=") for c in attach_calls.call_args_list]


class TestQuickCommands:
    """Test start and attach end to end."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_start_creates_and_attaches(self, server, attach_calls, session_name):
        """Test the bare command starts the dev server and attaches."""
        result = self.runner.invoke(main, [])

        assert result.exit_code == 0
        assert server.live == [session_name]
        assert server.commands[session_name] == "pnpm dev"
        assert attached_to(attach_calls) == [session_name]
        assert f"Creating new tmux session '{session_name}'" in result.output

    def test_start_twice_reuses_session(self, server, attach_calls, session_name):
        """Test a second start attaches to the session the first created."""
        self.runner.invoke(main, ["s"])
        result = self.runner.invoke(main, ["s"])

        assert result.exit_code == 0
        assert server.live == [session_name]
        assert "already exists. Attaching..." in result.output
        assert attached_to(attach_calls) == [session_name, session_name]

    def test_start_with_configured_command(self, server, attach_calls, session_name, tmp_path):
        """Test the dev command comes from the project config file."""
        (tmp_path / "tmuxdev.yaml").write_text("dev_command: npm run dev\n")

        result = self.runner.invoke(main, ["start"])

        assert result.exit_code == 0
        assert server.commands[session_name] == "npm run dev"

    def test_start_send_keys_mode(self, server, attach_calls, session_name):
        """Test send-keys mode types the command into the new shell."""
        result = self.runner.invoke(
            main, ["--launch-mode", "send-keys", "--dev-command", "make serve", "start"]
        )

        assert result.exit_code == 0
        assert server.commands[session_name] is None
        server.panes[session_name].send_keys.assert_called_once_with(
            "make serve", enter=True
        )

    def test_verbose_echoes_tmux_commands(self, attach_calls, session_name):
        """Test -v shows the tmux invocations."""
        result = self.runner.invoke(main, ["-v", "start"])

        assert result.exit_code == 0
        assert f"$ tmux has-session -t {session_name}" in result.output
        assert f"$ tmux attach-session -t ={session_name}" in result.output

    def test_attach_error_exit_is_not_fatal(self, server, attach_calls, session_name):
        """Test a failing tmux attach still exits 0."""
        server.live.append(session_name)
        attach_calls.return_value = subprocess.CompletedProcess(args=[], returncode=1)

        result = self.runner.invoke(main, ["attach"])

        assert result.exit_code == 0

    def test_attach_offer_accepted(self, server, attach_calls, session_name):
        """Test answering yes to the offer starts the session."""
        result = self.runner.invoke(main, ["a"], input="y\n")

        assert result.exit_code == 0
        assert f"Session '{session_name}' does not exist." in result.output
        assert server.live == [session_name]
        assert attached_to(attach_calls) == [session_name]

    @pytest.mark.parametrize("answer", ["n\n", ""])
    def test_attach_offer_declined_or_interrupted(self, server, attach_calls, answer):
        """Test no and end of input both leave tmux untouched."""
        result = self.runner.invoke(main, ["attach"], input=answer)

        assert result.exit_code == 0
        assert server.live == []
        attach_calls.assert_not_called()
        assert "Exiting..." in result.output

    def test_create_failure_exits_zero(self, server, attach_calls):
        """Test a tmux refusal is reported without a failing status."""
        server.new_session = MagicMock(side_effect=LibTmuxException("server exited"))

        result = self.runner.invoke(main, ["start"])

        assert result.exit_code == 0
        assert "Failed to create session" in result.output
        attach_calls.assert_not_called()


class TestMenuWorkflows:
    """Test the interactive menu end to end."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_create_and_attach(self, server, attach_calls, session_name):
        """Test creating from the menu then attaching."""
        result = self.runner.invoke(main, ["menu"], input="1\ny\n")

        assert result.exit_code == 0
        assert f"Start new session for current directory ({session_name})" in result.output
        assert server.live == [session_name]
        assert attached_to(attach_calls) == [session_name]

    def test_create_without_attach(self, server, attach_calls, session_name):
        """Test declining attach prints how to attach later."""
        result = self.runner.invoke(main, ["m"], input="1\nn\n")

        assert result.exit_code == 0
        assert server.live == [session_name]
        attach_calls.assert_not_called()
        assert f"tmux attach-session -t '{session_name}'" in result.output

    def test_select_existing(self, server, attach_calls):
        """Test attaching to another project's session."""
        server.live.extend(["api-main", "web-dev"])

        # 1) create current 2) select 3) kill 4) exit
        result = self.runner.invoke(main, ["menu"], input="2\n2\n")

        assert result.exit_code == 0
        assert attached_to(attach_calls) == ["web-dev"]

    def test_kill_confirmed(self, server, attach_calls):
        """Test killing a session after confirmation."""
        server.live.extend(["api-main", "web-dev"])

        result = self.runner.invoke(main, ["menu"], input="3\n1\ny\n")

        assert result.exit_code == 0
        assert server.live == ["web-dev"]
        assert "Killed session 'api-main'" in result.output

    def test_kill_defaults_to_no(self, server, attach_calls):
        """Test pressing Enter at the kill confirmation keeps the session."""
        server.live.append("api-main")

        result = self.runner.invoke(main, ["menu"], input="3\n1\n\n")

        assert result.exit_code == 0
        assert server.live == ["api-main"]
        assert "Session 'api-main' left running" in result.output

    def test_out_of_range_choice_reprompts(self, server, attach_calls):
        """Test an invalid number is rejected and asked again."""
        result = self.runner.invoke(main, ["menu"], input="9\n2\n")

        assert result.exit_code == 0
        assert "Goodbye!" in result.output
        assert server.live == []

    def test_interrupted_menu(self, server, attach_calls):
        """Test end of input at the menu exits cleanly."""
        result = self.runner.invoke(main, ["menu"], input="")

        assert result.exit_code == 0
        assert "Exiting..." in result.output
        attach_calls.assert_not_called()


class TestHelpWorkflow:
    """Test help against live state."""

    def test_help_after_start(self, attach_calls, session_name):
        """Test help reports a session created by start."""
        runner = CliRunner()
        runner.invoke(main, ["start"])

        result = runner.invoke(main, ["h"])

        assert result.exit_code == 0
        assert f"Session name:      {session_name}" in result.output
        assert "Session exists:    Yes" in result.output

    def test_unknown_command_leaves_tmux_alone(self, server, attach_calls):
        """Test an unknown command fails with status 1 and no tmux calls."""
        server.has_session = MagicMock()

        result = CliRunner().invoke(main, ["deploy"])

        assert result.exit_code == 1
        server.has_session.assert_not_called()
        attach_calls.assert_not_called()
