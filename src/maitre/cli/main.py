"""Maitre CLI — run the API, and hold a user session from the terminal.

Usage:
    maitre serve                                  # Run the API with uvicorn
    maitre login --email owner@bistro.test        # Prompts for the password
    maitre whoami                                 # Re-verify the stored session
    maitre logout                                 # Forget the stored session

The session lives in MAITRE_SESSION_FILE (default ~/.maitre/session.json)
and is driven through the same SessionManager a GUI client would use.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys

import click
import httpx

from maitre.client.service import AuthClientError, AuthService
from maitre.client.session import SessionManager
from maitre.client.store import FileSessionStore
from maitre.config import settings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _client(obj: dict) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Maitre API."""
    return httpx.AsyncClient(
        base_url=obj["api_url"],
        timeout=30.0,
        transport=obj.get("transport"),
    )


def _manager(obj: dict, http: httpx.AsyncClient) -> SessionManager:
    store = FileSessionStore(obj["session_file"])
    return SessionManager(AuthService(http, store))


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
@click.option("--api-url", default=None, help="API root, e.g. http://localhost:5000/api")
@click.option("--session-file", default=None, type=click.Path(dir_okay=False))
@click.pass_context
def cli(ctx: click.Context, api_url: str | None, session_file: str | None) -> None:
    """Maitre — restaurant back-office authentication."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("api_url", (api_url or settings.api_url).rstrip("/"))
    ctx.obj.setdefault("session_file", session_file or settings.session_file)


@cli.command()
@click.option("--host", default=settings.host, show_default=True)
@click.option("--port", default=settings.port, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run("maitre.main:app", host=host, port=port)


@cli.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_obj
def login(obj: dict, email: str, password: str) -> None:
    """Log in and store the session token."""

    async def _login():
        async with _client(obj) as http:
            manager = _manager(obj, http)
            await manager.start()
            if manager.is_authenticated:
                manager.logout()
            return await manager.login(email, password)

    try:
        user = _run(_login())
    except AuthClientError as e:
        _fail(e.message)
    except httpx.HTTPError as e:
        _fail(f"API not reachable at {obj['api_url']} ({e})")

    click.secho(f"Logged in as {user.name} ({user.role}) at {user.restaurant.name}", fg="green")


@cli.command()
@click.pass_obj
def whoami(obj: dict) -> None:
    """Show the stored session's user, re-verified against the API."""

    async def _whoami():
        async with _client(obj) as http:
            manager = _manager(obj, http)
            await manager.start()
            return manager.user

    user = _run(_whoami())
    if user is None:
        _fail("Not logged in")

    click.echo(f"{user.name} <{user.email}>")
    click.echo(f"  role:       {user.role}")
    click.echo(f"  restaurant: {user.restaurant.name} ({user.restaurant.id})")


@cli.command()
@click.pass_obj
def logout(obj: dict) -> None:
    """Forget the stored session."""

    async def _logout():
        async with _client(obj) as http:
            _manager(obj, http).logout()

    _run(_logout())
    click.echo("Logged out")


if __name__ == "__main__":
    cli()
