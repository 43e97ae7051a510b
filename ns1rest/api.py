"""The NS1 API client with all of its services attached."""

from __future__ import annotations

from typing import Any

from .account import SettingsService, TeamsService, UsersService, WarningsService
from .client import Client
from .data import DataFeedsService, DataSourcesService
from .dnssec import DNSSECService
from .ipam import IPAMService


class NS1Client(Client):
    """A ``Client`` that exposes each group of endpoints as a service.

    Takes the same arguments as ``Client``.
    """

    def __init__(self, http_client: Any = None, **options: Any) -> None:
        super().__init__(http_client, **options)
        self.settings = SettingsService(self)
        self.warnings = WarningsService(self)
        self.teams = TeamsService(self)
        self.users = UsersService(self)
        self.data_feeds = DataFeedsService(self)
        self.data_sources = DataSourcesService(self)
        self.dnssec = DNSSECService(self)
        self.ipam = IPAMService(self)