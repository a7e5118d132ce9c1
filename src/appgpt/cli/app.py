"""Terminal chat client using Typer."""
import asyncio

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..analytics import create_analytics_helper
from ..config import load_settings
from ..data import ChatMessageEntity, MessageRole, create_repositories
from ..flow import first
from ..ui import ChatScreenModel, ChatsSuccess, MessagesError, MessagesSuccess
from ..utils.logging import setup_logging

app = typer.Typer(
    name="appgpt",
    help="Multi-conversation chat client",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()

HELP_TEXT = (
    "[dim]Type a message to send it. Commands: "
    "/new, /chats, /switch N, /retry, /copy, /share, /quit[/dim]"
)


def _format_message(message: ChatMessageEntity) -> str:
    if message.role == MessageRole.USER:
        suffix = " [red](failed, /retry to resend)[/red]" if message.is_failed else ""
        return f"[bold cyan]You:[/] {message.content}{suffix}"
    return f"[bold magenta]Assistant:[/] {message.content}"


async def _render_messages(model: ChatScreenModel) -> None:
    """Print messages of the active chat as they arrive."""
    shown: set[tuple[str, bool]] = set()
    async for state in model.messages_ui_state:
        if isinstance(state, MessagesSuccess):
            for message in state.messages:
                key = (message.id, message.is_failed)
                if key in shown:
                    continue
                shown.add(key)
                console.print(_format_message(message), markup=True)
        elif isinstance(state, MessagesError):
            console.print(f"[red]Error: {state.message}[/red]")


def _print_chats(model: ChatScreenModel) -> None:
    state = model.chats_ui_state.value
    if not isinstance(state, ChatsSuccess):
        console.print("[dim]Chats are loading...[/dim]")
        return
    if not state.chats:
        console.print("[yellow]No chats yet[/yellow]")
        return

    selected = model.selected_chat_id.value
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title")
    table.add_column("Id", style="dim")
    for i, chat in enumerate(state.chats, 1):
        marker = " *" if chat.id == selected else ""
        table.add_row(str(i), (chat.title or "New chat") + marker, chat.id)
    console.print(table)


def _last_assistant_message(model: ChatScreenModel) -> str | None:
    state = model.messages_ui_state.value
    if not isinstance(state, MessagesSuccess):
        return None
    for message in reversed(state.messages):
        if message.role == MessageRole.ASSISTANT:
            return message.content
    return None


async def _handle_command(model: ChatScreenModel, line: str) -> bool:
    """Run one slash command. Returns False when the session should end."""
    command, _, argument = line.partition(" ")

    if command == "/quit":
        return False

    elif command == "/new":
        model.on_new_chat()
        console.print("[dim]Started a new chat[/dim]")

    elif command == "/chats":
        _print_chats(model)

    elif command == "/switch":
        state = model.chats_ui_state.value
        chats = state.chats if isinstance(state, ChatsSuccess) else []
        try:
            chat = chats[int(argument) - 1]
        except (ValueError, IndexError):
            console.print("[red]Usage: /switch N (see /chats)[/red]")
            return True
        model.on_chat_selected(chat.id)
        console.print(f"[dim]Switched to {chat.title or chat.id}[/dim]")

    elif command == "/retry":
        task = model.on_retry_send_message()
        if task is None:
            console.print("[yellow]Nothing to retry[/yellow]")
        else:
            await task

    elif command in ("/copy", "/share"):
        text = _last_assistant_message(model)
        if text is None:
            console.print("[yellow]No assistant message yet[/yellow]")
        elif command == "/copy":
            model.on_message_copied()
            console.print("[dim]Copied last answer[/dim]")
        else:
            model.on_message_shared(text)

    else:
        console.print(f"[red]Unknown command: {command}[/red]")
        console.print(HELP_TEXT)

    return True


@app.command()
def chat(
    chat_id: str | None = typer.Option(
        None,
        "--chat-id",
        "-c",
        help="Open this chat instead of the most recent one"
    ),
    env_file: str | None = typer.Option(
        None,
        "--env-file",
        help="Load settings from this dotenv file"
    ),
):
    """Start an interactive chat session."""
    settings = load_settings(env_file)
    setup_logging(settings.log_level, settings.log_json)

    async def _chat():
        repositories = create_repositories(settings.repository_backend)
        analytics = create_analytics_helper(settings.analytics)

        if not await first(repositories.preferences.welcome_shown()):
            console.print("[bold]Welcome to appgpt![/bold]")
            console.print(HELP_TEXT)
            await repositories.preferences.set_welcome_shown()

        model = ChatScreenModel(
            repositories.chats,
            repositories.messages,
            analytics,
            initial_chat_id=chat_id,
        )
        model.scope.launch(_render_messages(model), name="render-messages")

        try:
            while True:
                line = (await asyncio.to_thread(console.input, "[bold green]> [/]")).strip()
                if not line:
                    continue
                if line.startswith("/"):
                    if not await _handle_command(model, line):
                        break
                    continue

                model.on_text_change(line)
                task = model.on_send_message()
                if task is not None:
                    await task
        except (EOFError, KeyboardInterrupt):
            console.print()
        finally:
            model.on_dispose()
            await model.scope.join()

    asyncio.run(_chat())


@app.command()
def version():
    """Show the installed version."""
    console.print(f"appgpt {__version__}")


if __name__ == "__main__":
    app()
