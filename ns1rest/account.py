"""Services for the ``account`` endpoints: settings, usage warnings, teams and users."""

from __future__ import annotations

from typing import Any, Optional

from .client import Client, RestError
from .ddi import team_to_ddi_team, user_to_ddi_user


class _SentinelError(Exception):
    """An API failure recognised by its message."""

    default_message = ""

    def __init__(self, response: Any = None) -> None:
        super().__init__(self.default_message)
        self.response = response


class TeamExistsError(_SentinelError):
    """Raised when creating a team whose name is already taken."""

    default_message = "team already exists"


class TeamMissingError(_SentinelError):
    """Raised when the team does not exist."""

    default_message = "team does not exist"


class UserExistsError(_SentinelError):
    """Raised when creating a user whose login name is already taken."""

    default_message = "user already exists"


class UserMissingError(_SentinelError):
    """Raised when the user does not exist."""

    default_message = "user does not exist"


def _merge(target: Any, data: Any) -> None:
    """Refresh ``target`` in place with the fields the API returned."""
    if isinstance(target, dict) and isinstance(data, dict):
        target.update(data)


class _Service:
    def __init__(self, client: Client) -> None:
        self.client = client


class SettingsService(_Service):
    """The ``account/settings`` endpoint."""

    def get(self) -> tuple[dict, Any]:
        """Return the account's contact details and the response."""
        request = self.client.new_request("GET", "account/settings", None)
        return self.client.do(request)

    def update(self, settings: dict) -> Any:
        """Change the contact details; ``settings`` is refreshed from the reply."""
        request = self.client.new_request("POST", "account/settings", settings)
        data, response = self.client.do(request)
        _merge(settings, data)
        return response


class WarningsService(_Service):
    """The ``account/usagewarnings`` endpoint."""

    def get(self) -> tuple[dict, Any]:
        """Return the overage warning toggles and thresholds and the response."""
        request = self.client.new_request("GET", "account/usagewarnings", None)
        return self.client.do(request)

    def update(self, warning: dict) -> Any:
        """Change the warning settings; ``warning`` is refreshed from the reply."""
        request = self.client.new_request("POST", "account/usagewarnings", warning)
        data, response = self.client.do(request)
        _merge(warning, data)
        return response


class TeamsService(_Service):
    """The ``account/teams`` endpoint."""

    def list(self) -> tuple[list, Any]:
        """Return all teams of the account and the response."""
        request = self.client.new_request("GET", "account/teams", None)
        return self.client.do(request)

    def get(self, team_id: str) -> tuple[dict, Any]:
        """Return one team and the response."""
        request = self.client.new_request("GET", f"account/teams/{team_id}", None)
        try:
            return self.client.do(request)
        except RestError as err:
            if err.message == "Unknown team id":
                raise TeamMissingError(err.response) from err
            raise

    def _body(self, team: Optional[dict]) -> Any:
        if self.client.ddi and team is not None:
            return team_to_ddi_team(team)
        return team

    def create(self, team: dict) -> Any:
        """Create a team; ``team`` is refreshed from the reply."""
        request = self.client.new_request("PUT", "account/teams", self._body(team))
        try:
            data, response = self.client.do(request)
        except RestError as err:
            name = (team or {}).get("name", "")
            if err.message == f'team with name "{name}" exists':
                raise TeamExistsError(err.response) from err
            raise
        _merge(team, data)
        return response

    def update(self, team: dict) -> Any:
        """Change a team's name or rights; ``team`` is refreshed from the reply."""
        path = f"account/teams/{team.get('id', '')}"
        request = self.client.new_request("POST", path, self._body(team))
        try:
            data, response = self.client.do(request)
        except RestError as err:
            if err.message == "unknown team id":
                raise TeamMissingError(err.response) from err
            raise
        _merge(team, data)
        return response

    def delete(self, team_id: str) -> Any:
        """Delete a team and return the response."""
        request = self.client.new_request("DELETE", f"account/teams/{team_id}", None)
        try:
            _, response = self.client.do(request, decode=False)
        except RestError as err:
            if err.message == "unknown team id":
                raise TeamMissingError(err.response) from err
            raise
        return response


class UsersService(_Service):
    """The ``account/users`` endpoint."""

    def list(self) -> tuple[list, Any]:
        """Return all users of the account and the response."""
        request = self.client.new_request("GET", "account/users", None)
        return self.client.do(request)

    def get(self, username: str) -> tuple[dict, Any]:
        """Return one user and the response."""
        request = self.client.new_request("GET", f"account/users/{username}", None)
        try:
            return self.client.do(request)
        except RestError as err:
            if err.message == "Unknown user":
                raise UserMissingError(err.response) from err
            raise

    def _body(self, user: Optional[dict]) -> Any:
        if self.client.ddi and user is not None:
            return user_to_ddi_user(user)
        return user

    def create(self, user: dict) -> Any:
        """Create a user; ``user`` is refreshed from the reply."""
        request = self.client.new_request("PUT", "account/users", self._body(user))
        try:
            data, response = self.client.do(request)
        except RestError as err:
            if err.message == "request failed:Login Name is already in use.":
                raise UserExistsError(err.response) from err
            raise
        _merge(user, data)
        return response

    def update(self, user: dict) -> Any:
        """Change a user's details or rights; ``user`` is refreshed from the reply."""
        path = f"account/users/{user.get('username', '')}"
        request = self.client.new_request("POST", path, self._body(user))
        try:
            data, response = self.client.do(request)
        except RestError as err:
            if err.message == "Unknown user":
                raise UserMissingError(err.response) from err
            raise
        _merge(user, data)
        return response

    def delete(self, username: str) -> Any:
        """Delete a user and return the response."""
        request = self.client.new_request("DELETE", f"account/users/{username}", None)
        try:
            _, response = self.client.do(request, decode=False)
        except RestError as err:
            if err.message == "Unknown user":
                raise UserMissingError(err.response) from err
            raise
        return response