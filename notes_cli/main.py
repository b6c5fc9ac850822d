"""notekeep CLI entry point."""

import asyncio
import sys
from typing import Optional

import click

from .client import ApiError, NotekeepClient
from .config import LocalConfig
from .tui import (
    prompt_code,
    prompt_date_of_birth,
    prompt_email,
    prompt_name,
    print_error,
    print_info,
    print_note,
    print_success,
)


def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def make_client(ctx: click.Context, authenticated: bool = False) -> NotekeepClient:
    config: LocalConfig = ctx.obj["config"]
    return NotekeepClient(
        config.server_url,
        token=config.token if authenticated else None,
        transport=ctx.obj.get("transport"),
    )


def call(coro):
    """Run a client call, exiting with the server's message on failure."""
    try:
        return run_async(coro)
    except ApiError as e:
        print_error(e.message)
        if e.status_code == 401 and e.error_type == "authentication_error":
            print_info("Your session is no longer valid. Run 'notekeep login' again.")
        sys.exit(1)


def require_login(config: LocalConfig) -> None:
    if not config.is_logged_in():
        print_error("Not logged in. Run 'notekeep login' first.")
        sys.exit(1)


def finish_verification(ctx: click.Context, code: str) -> None:
    """Exchange the passcode of the pending flow for a session."""
    config: LocalConfig = ctx.obj["config"]
    client = make_client(ctx)

    if config.pending_flow == "signup":
        result = call(client.verify_otp(config.pending_user_id, code))
    else:
        result = call(client.verify_signin_otp(config.pending_user_id, code))

    user = result["user"]
    config.save_session(user["email"], result["token"])
    print_success(f"Logged in as {user['email']}")


@click.group()
@click.option("--server", envvar="NOTEKEEP_SERVER", default=None, help="notekeep server URL")
@click.pass_context
def cli(ctx, server: Optional[str]):
    """notekeep - personal notes with email passcode sign-in"""
    ctx.ensure_object(dict)
    config = LocalConfig.load()
    if server:
        config.server_url = server.rstrip("/")
    ctx.obj["config"] = config


@cli.command()
@click.option("--name", default=None)
@click.option("--email", default=None)
@click.option("--dob", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Date of birth, YYYY-MM-DD")
@click.pass_context
def signup(ctx, name, email, dob):
    """Create an account and verify it with the emailed code."""
    config: LocalConfig = ctx.obj["config"]
    date_of_birth = dob.date() if dob else None

    if name is None:
        name = prompt_name()
        email = email or prompt_email()
        date_of_birth = date_of_birth or prompt_date_of_birth()
    elif email is None:
        email = prompt_email()

    print_info("Creating account...")
    user_id = call(make_client(ctx).signup(name, email, date_of_birth))
    config.set_pending(user_id, "signup", email.lower())

    print_info("Verification code sent! Check your email.")
    finish_verification(ctx, prompt_code())


@cli.command()
@click.option("--email", default=None)
@click.pass_context
def login(ctx, email):
    """Sign in with a code sent to your email."""
    config: LocalConfig = ctx.obj["config"]
    email = email or prompt_email()

    print_info("Sending verification code...")
    user_id = call(make_client(ctx).signin(email))
    config.set_pending(user_id, "signin", email.lower())

    print_info("Verification code sent! Check your email.")
    finish_verification(ctx, prompt_code())


@cli.command()
@click.argument("code", required=False)
@click.pass_context
def verify(ctx, code):
    """Finish a pending signup or login with its code."""
    config: LocalConfig = ctx.obj["config"]
    if not config.pending_user_id:
        print_error("Nothing to verify. Run 'notekeep signup' or 'notekeep login'.")
        sys.exit(1)

    finish_verification(ctx, code or prompt_code())


@cli.command()
@click.argument("id_token")
@click.pass_context
def google(ctx, id_token):
    """Sign in with a Google ID token."""
    config: LocalConfig = ctx.obj["config"]
    result = call(make_client(ctx).google_auth(id_token))
    user = result["user"]
    config.save_session(user["email"], result["token"])
    print_success(f"Logged in as {user['email']}")


@cli.command()
@click.pass_context
def logout(ctx):
    """Clear saved credentials."""
    config: LocalConfig = ctx.obj["config"]

    if config.is_logged_in():
        email = config.email
        config.clear()
        print_success(f"Logged out from {email}")
    else:
        print_info("Not logged in")


@cli.command()
@click.pass_context
def status(ctx):
    """Show the server and current user."""
    config: LocalConfig = ctx.obj["config"]
    print_info(f"Server: {config.server_url}")

    if not config.is_logged_in():
        print_info("Not logged in")
        if config.pending_user_id:
            print_info(f"Waiting for the {config.pending_flow} code sent to {config.email}")
        return

    profile = call(make_client(ctx, authenticated=True).me())
    print_info(f"Logged in as: {profile['name']} <{profile['email']}>")


@cli.group()
@click.pass_context
def notes(ctx):
    """Manage your notes."""
    require_login(ctx.obj["config"])


@notes.command("list")
@click.pass_context
def list_notes(ctx):
    """List your notes, newest first."""
    items = call(make_client(ctx, authenticated=True).list_notes())
    if not items:
        print_info("No notes yet")
        return
    for note in items:
        print_note(note)


@notes.command("add")
@click.argument("title")
@click.argument("content")
@click.pass_context
def add_note(ctx, title, content):
    """Create a note."""
    note = call(make_client(ctx, authenticated=True).create_note(title, content))
    print_success(f"Created note {note['id']}")


@notes.command("edit")
@click.argument("note_id")
@click.option("--title", required=True)
@click.option("--content", required=True)
@click.pass_context
def edit_note(ctx, note_id, title, content):
    """Replace a note's title and content."""
    call(make_client(ctx, authenticated=True).update_note(note_id, title, content))
    print_success(f"Updated note {note_id}")


@notes.command("rm")
@click.argument("note_id")
@click.pass_context
def remove_note(ctx, note_id):
    """Delete a note."""
    call(make_client(ctx, authenticated=True).delete_note(note_id))
    print_success(f"Deleted note {note_id}")


if __name__ == "__main__":
    cli()
