"""Service for the ``ipam`` endpoints: addresses and subnets."""

from __future__ import annotations

from typing import Any, Optional

from .client import Client


class IPAMService:
    """The ``ipam/address`` endpoints."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def _list(self, path: str) -> tuple[list, Any]:
        request = self.client.new_request("GET", path, None)
        if self.client.follow_pagination:
            return self.client.do_with_pagination(request)
        return self.client.do(request)

    def list_addrs(self) -> tuple[list, Any]:
        """Return all root addresses of all networks and the last response."""
        return self._list("ipam/address")

    def get_subnet(self, addr_id: int) -> tuple[dict, Any]:
        """Return the subnet with the given address ID and the response."""
        request = self.client.new_request("GET", f"ipam/address/{addr_id}", None)
        return self.client.do(request)

    def get_children(self, addr_id: int) -> tuple[list, Any]:
        """Return all child addresses of an address and the last response."""
        return self._list(f"ipam/address/{addr_id}/children")

    def get_parent(self, addr_id: int) -> tuple[dict, Any]:
        """Return the parent of an address and the response."""
        request = self.client.new_request("GET", f"ipam/address/{addr_id}/parent", None)
        return self.client.do(request)

    def create_subnet(self, addr: dict) -> tuple[dict, Any]:
        """Create an address or subnet; ``prefix`` and ``network`` are required.

        Raises ``ValueError`` when either is missing.
        """
        if not addr.get("prefix"):
            raise ValueError("the Prefix field is required")
        if not addr.get("network"):
            raise ValueError("the Network field is required")
        request = self.client.new_request("PUT", "ipam/address", addr)
        return self.client.do(request)

    def edit_subnet(
        self, addr: dict, parent: bool
    ) -> tuple[dict, Optional[dict], Any]:
        """Update a subnet; ``id`` is required.

        Returns ``(address, parent address or None, response)``; the parent
        is only requested and returned when ``parent`` is true. Raises
        ``ValueError`` when the ID is missing.
        """
        if not addr.get("id"):
            raise ValueError("the ID field is required")
        path = f"ipam/address/{addr['id']}"
        if parent:
            path += "?parent=true"
        request = self.client.new_request("POST", path, addr)
        data, response = self.client.do(request)

        address = dict(data) if isinstance(data, dict) else {}
        parent_value = address.pop("parent", None)
        if not parent:
            return address, None, response
        parent_addr = dict(parent_value) if isinstance(parent_value, dict) else {}
        return address, parent_addr, response

    def split_subnet(self, addr_id: int, prefix: int) -> tuple[int, list[int], Any]:
        """Split unassigned space into equal pieces of ``prefix`` length.

        Returns ``(root address ID, IDs of the new prefixes, response)``.
        """
        request = self.client.new_request(
            "POST", f"ipam/address/{addr_id}/split", {"prefix": prefix}
        )
        data, response = self.client.do(request)
        data = data if isinstance(data, dict) else {}
        return (
            data.get("root_address_id", 0),
            list(data.get("prefix_ids") or []),
            response,
        )

    def merge_subnet(self, root_id: int, merge_id: int) -> tuple[dict, Any]:
        """Merge the subnet ``merge_id`` into ``root_id``; return the result."""
        request = self.client.new_request(
            "POST",
            "ipam/address/merge",
            {"root_address_id": root_id, "merged_address_id": merge_id},
        )
        return self.client.do(request)

    def delete_subnet(self, addr_id: int) -> Any:
        """Remove a subnet entirely and return the response."""
        request = self.client.new_request("DELETE", f"ipam/address/{addr_id}", None)
        _, response = self.client.do(request, decode=False)
        return response