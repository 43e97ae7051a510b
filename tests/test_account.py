import json
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from ns1rest.account import (
    SettingsService,
    TeamExistsError,
    TeamMissingError,
    TeamsService,
    UserExistsError,
    UserMissingError,
    UsersService,
    WarningsService,
)
from ns1rest.client import Client, RestError

ENDPOINT = "https://example.com/v1/"


@dataclass
class FakeResponse:
    status_code: int
    content: bytes
    request: Any
    headers: dict = field(default_factory=dict)


class FakeTransport:
    """Echoes the request body, or answers with a fixed status and body."""

    def __init__(self, status: int = 200, reply: Optional[Any] = None) -> None:
        self.status = status
        self.reply = reply
        self.requests = []

    def send(self, request):
        self.requests.append(request)
        if self.reply is None:
            body = request.body or b""
        else:
            body = json.dumps(self.reply).encode()
        return FakeResponse(self.status, body, request)

    def sent_json(self, index=0):
        return json.loads(self.requests[index].body)


def make_client(transport, ddi=False):
    return Client(transport, endpoint=ENDPOINT, ddi=ddi)


def test_create_team_without_ddi_sends_no_ddi_sections():
    transport = FakeTransport()
    teams = TeamsService(make_client(transport))
    team = {"id": "id-1", "name": "team-1", "permissions": {}}
    teams.create(team)
    sent = transport.sent_json()
    assert "security" not in sent["permissions"]
    assert "dhcp" not in sent["permissions"]
    assert "ipam" not in sent["permissions"]
    assert transport.requests[0].method == "PUT"
    assert transport.requests[0].url == ENDPOINT + "account/teams"


def test_create_ddi_team_sends_ddi_sections():
    transport = FakeTransport()
    teams = TeamsService(make_client(transport, ddi=True))
    team = {
        "id": "id-1",
        "name": "team-1",
        "ip_whitelist": [{"name": "whitelist", "values": ["1.1.1.1"]}],
        "permissions": {},
    }
    teams.create(team)
    sent = transport.sent_json()
    assert sent["permissions"]["security"] is not None
    assert sent["permissions"]["dhcp"] is not None
    assert sent["permissions"]["ipam"] is not None
    assert sent["ip_whitelist"] == [{"name": "whitelist", "values": ["1.1.1.1"]}]
    # the echoed DDI form is merged back into the caller's team
    assert "security" in team["permissions"]


def test_create_user_without_ddi_sends_no_ddi_sections():
    transport = FakeTransport()
    users = UsersService(make_client(transport))
    user = {
        "name": "name-1",
        "username": "user-1",
        "email": "user@example.com",
        "permissions": {},
    }
    users.create(user)
    sent = transport.sent_json()
    assert "security" not in sent["permissions"]
    assert "dhcp" not in sent["permissions"]
    assert "ipam" not in sent["permissions"]


def test_create_ddi_user_sends_ddi_sections():
    transport = FakeTransport()
    users = UsersService(make_client(transport, ddi=True))
    user = {
        "name": "name-1",
        "username": "user-1",
        "email": "user@example.com",
        "ip_whitelist": ["1.1.1.1"],
        "ip_whitelist_strict": True,
        "permissions": {},
    }
    users.create(user)
    sent = transport.sent_json()
    assert sent["permissions"]["security"] is not None
    assert sent["permissions"]["dhcp"] is not None
    assert sent["permissions"]["ipam"] is not None
    assert sent["ip_whitelist"] == ["1.1.1.1"]
    assert sent["ip_whitelist_strict"] is True


def test_team_get_unknown_raises_missing():
    transport = FakeTransport(404, {"message": "Unknown team id"})
    with pytest.raises(TeamMissingError) as info:
        TeamsService(make_client(transport)).get("nope")
    assert info.value.response.status_code == 404
    assert transport.requests[0].url == ENDPOINT + "account/teams/nope"


def test_team_create_existing_raises_exists():
    transport = FakeTransport(400, {"message": 'team with name "team-1" exists'})
    with pytest.raises(TeamExistsError):
        TeamsService(make_client(transport)).create({"name": "team-1"})


def test_team_update_and_delete_unknown_raise_missing():
    transport = FakeTransport(404, {"message": "unknown team id"})
    teams = TeamsService(make_client(transport))
    with pytest.raises(TeamMissingError):
        teams.update({"id": "id-9", "name": "x"})
    with pytest.raises(TeamMissingError):
        teams.delete("id-9")
    assert transport.requests[0].method == "POST"
    assert transport.requests[0].url == ENDPOINT + "account/teams/id-9"
    assert transport.requests[1].method == "DELETE"


def test_unrelated_error_is_not_translated():
    transport = FakeTransport(500, {"message": "boom"})
    with pytest.raises(RestError) as info:
        TeamsService(make_client(transport)).get("id-1")
    assert not isinstance(info.value, TeamMissingError)
    assert info.value.message == "boom"


def test_user_errors_are_translated():
    exists = FakeTransport(400, {"message": "request failed:Login Name is already in use."})
    with pytest.raises(UserExistsError):
        UsersService(make_client(exists)).create({"username": "user-1"})

    missing = FakeTransport(404, {"message": "Unknown user"})
    users = UsersService(make_client(missing))
    with pytest.raises(UserMissingError):
        users.get("user-1")
    with pytest.raises(UserMissingError):
        users.update({"username": "user-1"})
    with pytest.raises(UserMissingError):
        users.delete("user-1")
    assert missing.requests[1].url == ENDPOINT + "account/users/user-1"


def test_lists_return_decoded_items():
    transport = FakeTransport(200, [{"id": "a"}, {"id": "b"}])
    teams, _ = TeamsService(make_client(transport)).list()
    users, response = UsersService(make_client(transport)).list()
    assert [t["id"] for t in teams] == ["a", "b"]
    assert len(users) == 2
    assert response.status_code == 200


def test_user_update_refreshes_from_reply():
    transport = FakeTransport(200, {"username": "user-1", "last_access": 5.0})
    user = {"username": "user-1", "name": "name-1"}
    UsersService(make_client(transport)).update(user)
    assert user["last_access"] == 5.0
    assert user["name"] == "name-1"


def test_settings_get_and_update():
    transport = FakeTransport(200, {"customerid": 1, "email": "ops@example.com"})
    settings = SettingsService(make_client(transport))
    value, _ = settings.get()
    assert value["email"] == "ops@example.com"

    mine = {"email": "old@example.com"}
    settings.update(mine)
    assert mine["customerid"] == 1
    assert transport.requests[1].method == "POST"
    assert transport.requests[1].url == ENDPOINT + "account/settings"


def test_warnings_get_and_update():
    transport = FakeTransport()
    warnings = WarningsService(make_client(transport))
    warning = {"records": {"send_warnings": True, "warning_1": 50}}
    warnings.update(warning)
    assert transport.sent_json() == warning
    assert transport.requests[0].url == ENDPOINT + "account/usagewarnings"

    reply = FakeTransport(200, {"queries": {"send_warnings": False}})
    value, _ = WarningsService(make_client(reply)).get()
    assert value == {"queries": {"send_warnings": False}}