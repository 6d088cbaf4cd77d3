# src/recipe_auth/cli.py

"""Command line front end: recipe-auth login | logout | status | whoami."""

import argparse
import asyncio
import logging
import sys
import typing

from .app import AuthClient, create_auth_client
from .auth_headers import get_auth_headers
from .config import settings
from .observability import setup_logging

logger = logging.getLogger(__name__)


def _print_state(client: AuthClient) -> None:
    current = client.state.state
    if current.is_authenticated:
        user = current.user
        name = " ".join(part for part in (user.first_name, user.last_name) if part) or user.email
        print(f"Signed in as {name} <{user.email}>")
        expiry = client.store.get_token_expiry()
        if expiry is not None:
            print(f"Session expires at {expiry.isoformat()}")
    else:
        print("Not signed in.")
    if current.error:
        print(f"Last error: {current.error}")


def cmd_login(client: AuthClient) -> int:
    if client.state.state.is_authenticated:
        _print_state(client)
        return 0
    print("Opening your browser to sign in with Google...")
    ok = asyncio.run(client.flow.sign_in())
    _print_state(client)
    return 0 if ok or client.state.state.error is None else 1


def cmd_logout(client: AuthClient) -> int:
    client.flow.sign_out()
    _print_state(client)
    return 1 if client.state.state.error else 0


def cmd_status(client: AuthClient) -> int:
    _print_state(client)
    return 0


def cmd_whoami(client: AuthClient) -> int:
    """Asks the backend who the stored token belongs to."""
    headers = get_auth_headers(client.store)
    if not headers or not client.state.state.is_authenticated:
        print("Not signed in.")
        return 1
    user = asyncio.run(client.gateway.get_current_user(headers))
    if user is None:
        print("The backend did not accept the stored session.")
        return 1
    print(f"{user.external_id} {user.email}")
    return 0


COMMANDS: typing.Dict[str, typing.Callable[[AuthClient], int]] = {
    "login": cmd_login,
    "logout": cmd_logout,
    "status": cmd_status,
    "whoami": cmd_whoami,
}


def main(argv: typing.Optional[typing.List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="recipe-auth", description="Random Recipe sign-in")
    parser.add_argument("command", choices=sorted(COMMANDS))
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL")
    args = parser.parse_args(argv)

    setup_logging(args.log_level or settings.LOG_LEVEL)
    client = create_auth_client()
    client.start()
    return COMMANDS[args.command](client)


if __name__ == "__main__":
    sys.exit(main())
