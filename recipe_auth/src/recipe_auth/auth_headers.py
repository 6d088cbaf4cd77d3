# src/recipe_auth/auth_headers.py

import typing

from .session_store import SessionStore


def get_auth_headers(store: SessionStore) -> typing.Dict[str, str]:
    token = store.get_app_token()
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}
