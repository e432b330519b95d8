"""API path contract shared with the browser client."""

from __future__ import annotations

import re

CHAINS_LIST = "/api/chains"
CHAINS_GET = "/api/chains/{id}"

USER_ME = "/api/me"
USER_UPGRADE_MINER = "/api/game/miner/upgrade"

STAKES_CREATE = "/api/game/stake"
STAKES_LIST_MINE = "/api/game/stakes/me"

PREDICTIONS_CREATE = "/api/game/predict"
PREDICTIONS_LIST = "/api/game/predictions"

AUTH_LOGIN = "/api/login"
AUTH_LOGOUT = "/api/logout"
AUTH_USER = "/api/auth/user"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def build_url(path: str, params: dict[str, str | int] | None = None) -> str:
    """
    Fill ``{name}`` placeholders in ``path`` from ``params``.

    Params with no matching placeholder are ignored; placeholders with no
    matching param are left in place.
    """
    if not params:
        return path

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        return str(params[key]) if key in params else match.group(0)

    return _PLACEHOLDER.sub(_sub, path)
