"""Mapping of teams and users to the permission layout of the DDI API."""

from __future__ import annotations

from typing import Any, Mapping, Optional

_ACCOUNT_KEYS = (
    "manage_users",
    "manage_teams",
    "manage_apikeys",
    "manage_account_settings",
    "view_activity_log",
)

_SECURITY_KEYS = (
    "manage_global_2fa",
    "manage_active_directory",
)


def _section(value: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    return dict(value or {})


def _ddi_permissions(permissions: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Build a DDI permissions map; missing sections become empty defaults."""
    permissions = permissions or {}
    account = permissions.get("account") or {}
    security = permissions.get("security") or {}
    return {
        "dns": _section(permissions.get("dns")),
        "data": _section(permissions.get("data")),
        "account": {key: account.get(key, False) for key in _ACCOUNT_KEYS},
        "security": {key: security.get(key, False) for key in _SECURITY_KEYS},
        "dhcp": _section(permissions.get("dhcp")),
        "ipam": _section(permissions.get("ipam")),
    }


def team_to_ddi_team(team: Mapping[str, Any]) -> dict[str, Any]:
    """Return the DDI-compatible form of a team.

    The ``security``, ``dhcp`` and ``ipam`` permission sections are always
    present, filled with defaults when the team does not set them.
    """
    result: dict[str, Any] = {}
    if team.get("id"):
        result["id"] = team["id"]
    result["name"] = team.get("name", "")
    result["permissions"] = _ddi_permissions(team.get("permissions"))
    result["ip_whitelist"] = team.get("ip_whitelist")
    return result


def user_to_ddi_user(user: Mapping[str, Any]) -> dict[str, Any]:
    """Return the DDI-compatible form of a user.

    The ``security``, ``dhcp`` and ``ipam`` permission sections are always
    present, filled with defaults when the user does not set them.
    """
    return {
        "last_access": user.get("last_access", 0.0),
        "name": user.get("name", ""),
        "username": user.get("username", ""),
        "email": user.get("email", ""),
        "teams": user.get("teams"),
        "notify": _section(user.get("notify")),
        "ip_whitelist": user.get("ip_whitelist"),
        "ip_whitelist_strict": user.get("ip_whitelist_strict", False),
        "permissions": _ddi_permissions(user.get("permissions")),
    }