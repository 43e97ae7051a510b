"""Service for the ``zones/<zone>/dnssec`` endpoint."""

from __future__ import annotations

from typing import Any

from .client import Client, RestError


class _SentinelError(Exception):
    """An API failure recognised by its message."""

    default_message = ""

    def __init__(self, response: Any = None) -> None:
        super().__init__(self.default_message)
        self.response = response


class ZoneMissingError(_SentinelError):
    """Raised when the zone does not exist."""

    default_message = "zone does not exist"


class DNSSECNotEnabledError(_SentinelError):
    """Raised when DNSSEC is not enabled for the zone."""

    default_message = "DNSSEC is not enabled on the zone"


class DNSSECService:
    """The ``zones/<zone>/dnssec`` endpoint."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def get(self, zone: str) -> tuple[dict, Any]:
        """Return the DNSSEC details of a zone and the response."""
        request = self.client.new_request("GET", f"zones/{zone}/dnssec", None)
        try:
            return self.client.do(request)
        except RestError as err:
            if err.message == "zone not found":
                raise ZoneMissingError(err.response) from err
            if err.message == "DNSSEC is not enabled on the zone":
                raise DNSSECNotEnabledError(err.response) from err
            raise