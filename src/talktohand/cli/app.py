"""Main CLI application using Typer."""
import asyncio
import contextlib
import logging
import signal

import typer
from dotenv import load_dotenv
from rich.console import Console, Group
from rich.logging import RichHandler
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

from ..chat import ChatError, ConversationController, ConversationState, Message, list_models
from ..config import LogLevel
from .providers import get_message_store, get_session_settings, get_settings_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="talktohand",
    help="Chat with a self-hosted, OpenAI-compatible LLM server",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help="Log verbosity: debug, info, warning, or error"
    )
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=LogLevel.from_string(log_level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _streaming_override(no_stream: bool) -> bool | None:
    return False if no_stream else None


def _render_message(message: Message) -> Panel:
    if message.is_from_user:
        return Panel(message.text, title="You", title_align="left", border_style="green")
    return Panel(Markdown(message.text), title="Assistant", title_align="left", border_style="cyan")


def _render_reply(state: ConversationState, first_reply_index: int) -> Group:
    """Render the messages produced since the user's last message."""
    parts = [_render_message(m) for m in state.messages[first_reply_index:]]
    if state.is_awaiting_first_token:
        parts.append(Spinner("dots", text="[dim]thinking...[/dim]"))
    return Group(*parts)


async def _send_live(controller: ConversationController, text: str) -> None:
    """Send *text* and render the reply as it streams in.

    Ctrl-C cancels the reply; the partial text is kept.
    """
    first_reply_index = len(controller.state.messages) + 1
    loop = asyncio.get_running_loop()

    with Live(console=console, refresh_per_second=15) as live:
        unsubscribe = controller.subscribe(
            lambda state: live.update(_render_reply(state, first_reply_index))
        )
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signal.SIGINT, controller.cancel)
        try:
            await controller.send(text)
        finally:
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(signal.SIGINT)
            unsubscribe()


@app.command()
def chat(
    no_stream: bool = typer.Option(
        False,
        "--no-stream",
        help="Wait for the complete reply instead of streaming it"
    ),
    recent: int = typer.Option(
        10,
        "--recent",
        "-r",
        help="Number of stored messages to show on start"
    )
):
    """Start an interactive chat. Type /clear to wipe history, /exit to quit."""
    store = get_message_store()
    controller = ConversationController(get_session_settings(_streaming_override(no_stream)), store)

    with asyncio.Runner() as runner:
        runner.run(store.connect())
        try:
            runner.run(controller.load_history())
            if recent > 0:
                for message in controller.state.messages[-recent:]:
                    console.print(_render_message(message))

            console.print("[dim]Ctrl-C cancels a reply, Ctrl-D exits.[/dim]")
            while True:
                try:
                    user_input = console.input("[bold green]you>[/bold green] ")
                except (EOFError, KeyboardInterrupt):
                    console.print()
                    break

                command = user_input.strip()
                if command == "/exit":
                    break
                if command == "/clear":
                    runner.run(controller.clear_history())
                    console.print("[dim]History cleared.[/dim]")
                    continue
                if not command:
                    continue

                runner.run(_send_live(controller, user_input))
        finally:
            runner.run(store.disconnect())


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    no_stream: bool = typer.Option(
        False,
        "--no-stream",
        help="Wait for the complete reply instead of streaming it"
    )
):
    """Send a single message and print the reply."""
    async def _ask():
        store = get_message_store()
        controller = ConversationController(
            get_session_settings(_streaming_override(no_stream)), store
        )
        try:
            await store.connect()
            await controller.load_history()
            await _send_live(controller, prompt)
        finally:
            await store.disconnect()

    asyncio.run(_ask())


@app.command()
def models(
    select: str | None = typer.Option(
        None,
        "--select",
        "-s",
        help="Model to store as the default for future chats"
    )
):
    """List the models offered by the configured server."""
    async def _models():
        settings = get_session_settings().get()
        try:
            available = await list_models(settings.server_url, settings.api_key)
        except ChatError as e:
            console.print(f"[red]Error: {e.description}[/red]")
            raise typer.Exit(code=1)

        if select is not None:
            if select not in available:
                console.print(f"[red]Error: Model '{select}' is not offered by the server[/red]")
                raise typer.Exit(code=1)
            get_settings_store().set(model_name=select)
            console.print(f"[green]Default model set to {select}[/green]")
            return

        if not available:
            console.print("[yellow]The server reported no models.[/yellow]")
            return

        table = Table(title="Available Models")
        table.add_column("Model", style="cyan")
        table.add_column("Selected", justify="center")
        for model_id in available:
            table.add_row(model_id, "*" if model_id == settings.model_name else "")
        console.print(table)

    asyncio.run(_models())


@app.command()
def history(
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Delete all stored messages"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-l",
        help="Number of most recent messages to show"
    )
):
    """Show or clear the stored conversation."""
    async def _history():
        store = get_message_store()
        try:
            await store.connect()
            if clear:
                await store.clear()
                console.print("[green]History cleared.[/green]")
                return

            messages = await store.load()
            if not messages:
                console.print("[dim]No stored messages.[/dim]")
                return

            table = Table(title=f"Conversation ({len(messages)} messages)")
            table.add_column("Time", style="dim", no_wrap=True)
            table.add_column("Role", style="cyan")
            table.add_column("Text")
            shown = messages[-limit:] if limit > 0 else []
            for message in shown:
                table.add_row(
                    message.created_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                    message.role,
                    message.text,
                )
            console.print(table)
        finally:
            await store.disconnect()

    asyncio.run(_history())


@app.command()
def config(
    server_url: str | None = typer.Option(None, "--server-url", help="Server base URL"),
    api_key: str | None = typer.Option(None, "--api-key", help="API key sent as bearer token"),
    model: str | None = typer.Option(None, "--model", help="Model identifier"),
    stream: bool | None = typer.Option(
        None,
        "--stream/--no-stream",
        help="Stream replies by default"
    )
):
    """Show or update the stored settings."""
    store = get_settings_store()
    changes = {
        key: value
        for key, value in {
            "server_url": server_url,
            "api_key": api_key,
            "model_name": model,
            "streaming": stream,
        }.items()
        if value is not None
    }

    settings = store.set(**changes) if changes else store.get()
    if changes:
        console.print("[green]Settings saved.[/green]")

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Server URL", settings.server_url or "[dim](not set)[/dim]")
    table.add_row("API key", settings.masked_api_key or "[dim](not set)[/dim]")
    table.add_row("Model", settings.model_name)
    table.add_row("Streaming", "on" if settings.streaming else "off")
    console.print(table)


if __name__ == "__main__":
    app()
