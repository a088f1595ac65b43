"""Tests for the command-line helpers."""

import argparse
import io

import pytest
from rich.console import Console

from codestream import app
from codestream.agent import ChatClient
from codestream.agent.sse import StreamEvent
from codestream.app import LivePrinter, print_artifacts, run_turn
from codestream.config import CodestreamConfig
from codestream.core.artifacts import Artifact
from codestream.core.modes import InteractionMode


def make_console():
    return Console(file=io.StringIO(), width=80, color_system=None)


class TestLivePrinter:
    def test_writes_only_new_text(self):
        console = make_console()
        printer = LivePrinter(console)
        printer.update("Hel")
        printer.update("Hello")
        printer.finish("Hello!")
        assert console.file.getvalue() == "Hello!\n"

    def test_rewrites_when_text_diverges(self):
        console = make_console()
        printer = LivePrinter(console)
        printer.update("abc")
        printer.update("xyz")
        assert console.file.getvalue() == "abc\nxyz"

    def test_placeholders_are_not_markup(self):
        console = make_console()
        printer = LivePrinter(console)
        printer.finish("see [Code: py] and [bold]")
        assert console.file.getvalue() == "see [Code: py] and [bold]\n"


class TestRunTurn:
    @pytest.mark.asyncio
    async def test_prints_narration_and_new_artifacts(self, fake_transport):
        transport = fake_transport(
            ["Here: [CODE_START:python]print(1)[CODE_END] done", StreamEvent.done()]
        )
        console = make_console()
        printer = LivePrinter(console)
        client = ChatClient(transport, on_update=printer.update)
        await run_turn(client, printer, "show me", InteractionMode.CODE)

        out = console.file.getvalue()
        assert "Here: [Code: python] done\n" in out
        assert "Python Code" in out
        assert "print(1)" in out

    def test_incomplete_artifacts_are_flagged(self, fake_transport):
        client = ChatClient(fake_transport())
        client.artifacts.add(Artifact(language="sh", content="ls"))
        console = make_console()
        print_artifacts(client, console=console)
        assert "Sh Code (incomplete)" in console.file.getvalue()

    def test_unknown_language_still_renders(self, fake_transport):
        client = ChatClient(fake_transport())
        client.artifacts.add(Artifact(language="", content="plain body"))
        console = make_console()
        print_artifacts(client, console=console)
        assert "plain body" in console.file.getvalue()


class TestMain:
    @pytest.fixture(autouse=True)
    def default_config(self, monkeypatch):
        monkeypatch.setattr(app, "load_config", lambda: (CodestreamConfig(), None))

    def test_file_mode_without_attachment_exits_nonzero(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["codestream", "--mode", "file", "hi"])
        with pytest.raises(SystemExit) as exc:
            app.main()
        assert exc.value.code == 1
        assert "Error: File mode requires an attachment" in capsys.readouterr().err

    def test_missing_attachment_file_exits_nonzero(self, monkeypatch, capsys, tmp_path):
        missing = tmp_path / "nope.txt"
        monkeypatch.setattr(
            "sys.argv", ["codestream", "--mode", "file", "--file", str(missing), "hi"]
        )
        with pytest.raises(SystemExit) as exc:
            app.main()
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_repl_reports_errors_and_continues(
        self, monkeypatch, capsys, fake_transport
    ):
        transport = fake_transport(["fine", StreamEvent.done()])
        monkeypatch.setattr(app, "create_transport", lambda config, http: transport)
        lines = iter(["/mode nonsense", "/mode file", "hi", "/mode chat", "hello", "/quit"])
        monkeypatch.setattr("builtins.input", lambda prompt: next(lines))

        args = argparse.Namespace(mode=None, prompt=None, file=None)
        console = make_console()
        status = await app.run(CodestreamConfig(), args, console)

        assert status == 0
        err = capsys.readouterr().err
        assert "Unknown mode: nonsense" in err
        assert "File mode requires an attachment" in err
        assert "fine\n" in console.file.getvalue()
        assert [r.endpoint for r in transport.requests] == ["/chat/stream"]
