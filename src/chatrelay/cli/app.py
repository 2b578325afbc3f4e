"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from ..auth.jwt_gate import JWTAuthGate
from ..client import (
    ChatTransport,
    ClientConversationState,
    ClientSession,
    EntryStatus,
    JSONFileKeyValueStore,
    UserProfile,
)
from ..client.transport import DEFAULT_BASE_URL
from ..config import get_settings
from ..errors import ChatRelayError
from ..logging_config import setup_logging

DEFAULT_CLIENT_STATE = Path.home() / ".chatrelay" / "client.json"

app = typer.Typer(
    name="chatrelay",
    help="Per-user chat history in front of pluggable AI completion providers",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(5000, "--port", "-p", help="Bind port"),
):
    """Run the chat API server."""
    import uvicorn

    from ..api import create_app

    settings = get_settings()
    try:
        api = create_app(settings)
    except (ValueError, ChatRelayError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    uvicorn.run(api, host=host, port=port, log_level=settings.log_level.lower())


@app.command()
def token(
    user_id: str = typer.Argument(..., help="User id to put in the 'sub' claim"),
    name: str = typer.Option(None, "--name", "-n", help="Display name"),
    save: bool = typer.Option(
        False,
        "--save",
        help="Also store the token and profile for the 'chat' command"
    ),
    state_file: Path = typer.Option(DEFAULT_CLIENT_STATE, "--state-file", help="Client state file"),
):
    """Issue a bearer token for a user (demo/operator helper)."""
    settings = get_settings()
    if not settings.jwt_secret:
        console.print("[red]Error: CHATRELAY_JWT_SECRET not set in environment[/red]")
        raise typer.Exit(code=1)

    gate = JWTAuthGate(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_ttl_seconds=settings.token_ttl_seconds,
    )
    issued = gate.issue_token(user_id, name)

    if save:
        store = JSONFileKeyValueStore(state_file)
        session = ClientSession.load(store)
        session.token = issued
        session.user = UserProfile(id=user_id, name=name or user_id)
        session.save(store)
        console.print(f"[green]Saved credentials for {user_id} to {state_file}[/green]")
    else:
        console.print(issued)


@app.command()
def chat(
    base_url: str = typer.Option(DEFAULT_BASE_URL, "--url", "-u", help="Chat API base URL"),
    provider: str = typer.Option(None, "--provider", help="Provider name (server default if omitted)"),
    state_file: Path = typer.Option(DEFAULT_CLIENT_STATE, "--state-file", help="Client state file"),
):
    """Interactive chat against a running server.

    Commands: /clear, /export [path], /theme, /logout, exit
    """
    setup_logging("WARNING")

    async def _chat():
        store = JSONFileKeyValueStore(state_file)
        session = ClientSession.load(store)
        transport = ChatTransport(session, base_url=base_url)
        state = ClientConversationState(transport, session, provider=provider)

        try:
            who = session.user.name if session.user else "Guest"
            console.print(Panel(f"Welcome, {who}!", title="chatrelay", border_style="cyan"))
            if not session.authenticated:
                console.print("[yellow]Not logged in: history will not be saved[/yellow]")

            if await state.load():
                for entry in state.entries:
                    _print_entry(entry.sender, entry.text, session)

            console.print("[dim]Type 'exit', 'quit', or 'q' to leave\n[/dim]")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                command = user_input.strip()
                if not command:
                    continue
                if command.lower() in ("exit", "quit", "q"):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if command == "/clear":
                    if await state.clear():
                        console.print("[dim]Chat cleared.[/dim]")
                    else:
                        console.print("[red]Could not clear chat.[/red]")
                    continue

                if command.startswith("/export"):
                    target = Path(command.removeprefix("/export").strip() or "chat_export.json")
                    document = await state.export()
                    if document is None:
                        console.print("[red]Could not export chat.[/red]")
                    else:
                        target.write_bytes(document)
                        console.print(f"[dim]Exported to {target}[/dim]")
                    continue

                if command == "/theme":
                    console.print(f"[dim]Theme: {session.toggle_theme(store)}[/dim]")
                    continue

                if command == "/logout":
                    session.logout(store)
                    console.print("[dim]Logged out.[/dim]")
                    break

                with console.status("[dim]Assistant is typing...[/dim]"):
                    entry = await state.send(user_input)
                if entry is not None:
                    style = "red" if entry.status == EntryStatus.ERROR else None
                    _print_entry("bot", entry.text, session, style=style)
        finally:
            await transport.close()

    asyncio.run(_chat())


def _print_entry(sender: str, text: str, session: ClientSession, style: str | None = None) -> None:
    if sender == "user":
        name = session.user.name if session.user else "You"
        console.print(f"[bold yellow]{name}:[/bold yellow] {text}")
    else:
        console.print("[bold cyan]Assistant:[/bold cyan]", text, style=style)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
