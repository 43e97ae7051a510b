"""Services for the ``data/feeds`` and ``data/sources`` endpoints."""

from __future__ import annotations

from typing import Any

from .client import Client


def _merge(target: Any, data: Any) -> None:
    """Refresh ``target`` in place with the fields the API returned."""
    if isinstance(target, dict) and isinstance(data, dict):
        target.update(data)


class _Service:
    def __init__(self, client: Client) -> None:
        self.client = client


class DataFeedsService(_Service):
    """The ``data/feeds`` endpoint."""

    def list(self, source_id: str) -> tuple[list, Any]:
        """Return all feeds connected to a data source and the response."""
        request = self.client.new_request("GET", f"data/feeds/{source_id}", None)
        return self.client.do(request)

    def get(self, source_id: str, feed_id: str) -> tuple[dict, Any]:
        """Return one feed of a data source and the response."""
        request = self.client.new_request("GET", f"data/feeds/{source_id}/{feed_id}", None)
        return self.client.do(request)

    def create(self, source_id: str, feed: dict) -> Any:
        """Connect a new feed to a data source; ``feed`` is refreshed from the reply."""
        request = self.client.new_request("PUT", f"data/feeds/{source_id}", feed)
        data, response = self.client.do(request)
        _merge(feed, data)
        return response

    def update(self, source_id: str, feed: dict) -> Any:
        """Modify an existing feed; ``feed`` is refreshed from the reply.

        The feed's ``data``, ``destinations`` and ``networks`` are not changed
        this way; use ``DataSourcesService.publish`` to send data.
        """
        path = f"data/feeds/{source_id}/{feed.get('id', '')}"
        request = self.client.new_request("POST", path, feed)
        data, response = self.client.do(request)
        _merge(feed, data)
        return response

    def delete(self, source_id: str, feed_id: str) -> Any:
        """Disconnect a feed from its data source and return the response."""
        request = self.client.new_request("DELETE", f"data/feeds/{source_id}/{feed_id}", None)
        _, response = self.client.do(request, decode=False)
        return response


class DataSourcesService(_Service):
    """The ``data/sources`` endpoint."""

    def list(self) -> tuple[list, Any]:
        """Return all connected data sources and the response."""
        request = self.client.new_request("GET", "data/sources", None)
        return self.client.do(request)

    def get(self, source_id: str) -> tuple[dict, Any]:
        """Return one data source and the response."""
        request = self.client.new_request("GET", f"data/sources/{source_id}", None)
        return self.client.do(request)

    def create(self, source: dict) -> Any:
        """Create a data source; ``source`` is refreshed from the reply."""
        request = self.client.new_request("PUT", "data/sources", source)
        data, response = self.client.do(request)
        _merge(source, data)
        return response

    def update(self, source: dict) -> Any:
        """Modify a data source's details; ``source`` is refreshed from the reply."""
        path = f"data/sources/{source.get('id', '')}"
        request = self.client.new_request("POST", path, source)
        data, response = self.client.do(request)
        _merge(source, data)
        return response

    def delete(self, source_id: str) -> Any:
        """Remove a data source with all its feeds and return the response."""
        request = self.client.new_request("DELETE", f"data/sources/{source_id}", None)
        _, response = self.client.do(request, decode=False)
        return response

    def publish(self, source_id: str, data: Any) -> Any:
        """Publish ``data`` to a data source and return the response."""
        request = self.client.new_request("POST", f"feed/{source_id}", data)
        _, response = self.client.do(request, decode=False)
        return response