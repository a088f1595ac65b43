import argparse
import asyncio
import sys

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from codestream.agent import ChatClient, create_transport
from codestream.config import CodestreamConfig, load_config
from codestream.core.artifacts import Artifact
from codestream.core.modes import InteractionMode
from codestream.errors import CodestreamError

# Failures caused by user input rather than by the backend
USER_ERRORS = (ValueError, OSError, CodestreamError)


class LivePrinter:
    """Writes the growing narration of a turn to a console as it streams."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._printed = ""

    def _write(self, text: str) -> None:
        self.console.print(
            text, end="", markup=False, highlight=False, emoji=False, soft_wrap=True
        )

    def reset(self) -> None:
        self._printed = ""

    def update(self, text: str) -> None:
        if text.startswith(self._printed):
            self._write(text[len(self._printed) :])
        else:
            self._write("\n" + text)
        self._printed = text

    def finish(self, text: str) -> None:
        self.update(text)
        self.console.print()
        self._printed = ""


def render_artifact(artifact: Artifact) -> Panel:
    title = Text(artifact.title)
    if artifact.collecting:
        title.append(" (incomplete)", style="yellow")
    return Panel(
        Syntax(artifact.content, artifact.language or "text"),
        title=title,
        subtitle=artifact.id[:8],
        title_align="left",
    )


def print_artifacts(
    client: ChatClient, start: int = 0, console: Console | None = None
) -> None:
    """Print artifacts created since index *start*."""
    console = console or Console()
    for artifact in client.artifacts.artifacts[start:]:
        console.print(render_artifact(artifact))


def print_error(error: BaseException, console: Console | None = None) -> None:
    console = console or Console(stderr=True)
    console.print(Text(f"Error: {error}", style="bold red"))


async def run_turn(
    client: ChatClient,
    printer: LivePrinter,
    text: str,
    mode: InteractionMode,
    attachment=None,
) -> None:
    before = len(client.artifacts)
    printer.reset()
    message = await client.send(text, mode=mode, attachment=attachment)
    if message is not None:
        printer.finish(message.content)
    print_artifacts(client, before, printer.console)


async def checked_turn(client, printer, text, mode, attachment=None) -> bool:
    """Run one turn, reporting input errors instead of raising them."""
    try:
        await run_turn(client, printer, text, mode, attachment)
    except USER_ERRORS as e:
        print_error(e)
        return False
    return True


async def run(config: CodestreamConfig, args, console: Console | None = None) -> int:
    """Run one prompt or the interactive loop; returns the exit status."""
    mode = InteractionMode.from_name(args.mode) if args.mode else None
    printer = LivePrinter(console)

    async with httpx.AsyncClient(timeout=config.timeout) as http:
        transport = create_transport(config, http)
        client = ChatClient(transport, config, on_update=printer.update)
        mode = mode or client.mode

        if args.prompt:
            ok = await checked_turn(client, printer, args.prompt, mode, args.file)
            return 0 if ok else 1

        while True:
            try:
                text = await asyncio.to_thread(input, f"{mode.value.name}> ")
            except EOFError:
                break
            command = text.strip()
            if command in ("/quit", "/exit"):
                break
            if command == "/clear":
                client.clear()
                continue
            if command.startswith("/mode "):
                try:
                    mode = InteractionMode.from_name(command.split(None, 1)[1].strip())
                except ValueError as e:
                    print_error(e)
                continue
            await checked_turn(client, printer, text, mode, args.file)
    return 0


def main():
    """Main entry point for the codestream command."""
    parser = argparse.ArgumentParser()
    parser.add_argument("prompt", nargs="?", default=None, help="Prompt to send")
    parser.add_argument(
        "--mode",
        default=None,
        choices=[m.value.name for m in InteractionMode],
        help="Interaction mode",
    )
    parser.add_argument("--base-url", default=None, help="Chat backend URL")
    parser.add_argument(
        "--direct",
        action="store_true",
        default=None,
        help="Call the model through any-llm instead of the backend",
    )
    parser.add_argument("--model", default=None, help="Model to use")
    parser.add_argument("--file", default=None, help="Attachment for file mode")
    parser.add_argument(
        "--logging", action="store_true", default=None, help="Enable logging"
    )
    args = parser.parse_args()

    config, config_error = load_config()

    # Command-line arguments override config
    if args.base_url is not None:
        config.base_url = args.base_url
    if args.direct:
        config.transport = "direct"
    if args.model is not None:
        config.model = args.model
    if args.file is not None:
        from pathlib import Path

        args.file = Path(args.file)
    if args.logging:
        import logging

        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            filename="codestream.log",
            filemode="a",  # append mode
        )
        logging.getLogger("codestream.agent").setLevel(logging.DEBUG)

    if config_error:
        Console(stderr=True).print(
            Text(f"Config error: {config_error}", style="red"), highlight=False
        )

    try:
        status = asyncio.run(run(config, args))
    except KeyboardInterrupt:
        status = 0
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
