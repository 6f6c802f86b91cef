# dashboard/utils/guards.py

from __future__ import annotations

from typing import Union


# Paths the auth check never runs on
UNGUARDED_PREFIXES = ("/api", "/static")
UNGUARDED_SUFFIXES = (".png",)

# Reachable whether or not someone is signed in
ALWAYS_ALLOWED = ("/logout",)

DASHBOARD_PREFIX = "/dashboard"


def is_guarded_path(path: str) -> bool:
    """
    True when the auth check applies to ``path``: everything except API
    routes, static assets and .png files.
    """
    path = path or "/"
    if path.startswith(UNGUARDED_PREFIXES):
        return False
    if path.endswith(UNGUARDED_SUFFIXES):
        return False
    return True


def is_dashboard_path(path: str) -> bool:
    return path == DASHBOARD_PREFIX or path.startswith(DASHBOARD_PREFIX + "/")


def authorized(is_logged_in: bool, path: str) -> Union[bool, str]:
    """
    Returns True to let the request through, False to send the visitor to
    the login page, or a path to redirect a signed-in user to.
    """
    if path in ALWAYS_ALLOWED:
        return True

    if is_dashboard_path(path):
        return bool(is_logged_in)

    if is_logged_in:
        return DASHBOARD_PREFIX

    return True
