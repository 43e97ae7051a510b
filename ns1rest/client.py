"""Core HTTP client for the NS1 REST API."""

from __future__ import annotations

import dataclasses
import json
import re
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional
from urllib.parse import urljoin, urlsplit

import requests

from .headers import parse_link

CLIENT_VERSION = "2.4.4"

DEFAULT_ENDPOINT = "https://api.nsone.net/v1/"
DEFAULT_FOLLOW_PAGINATION = True
DEFAULT_USER_AGENT = f"ns1rest/{CLIENT_VERSION}"

HEADER_AUTH = "X-NSONE-Key"
HEADER_RATE_LIMIT = "X-Ratelimit-Limit"
HEADER_RATE_REMAINING = "X-Ratelimit-Remaining"
HEADER_RATE_PERIOD = "X-Ratelimit-Period"

_INTEGER = re.compile(r"[+-]?\d+")


class RestError(Exception):
    """Raised for any HTTP response outside the 2xx range."""

    def __init__(self, response: Any, message: str = "") -> None:
        super().__init__(message)
        self.response = response
        self.message = message

    def __str__(self) -> str:
        request = getattr(self.response, "request", None)
        method = getattr(request, "method", "") or ""
        url = getattr(request, "url", None) or getattr(self.response, "url", "")
        return f"{method} {url}: {self.response.status_code} {self.message}"


@dataclass
class RateLimit:
    """Values of the X-Ratelimit-* response headers."""

    limit: int = 0
    remaining: int = 0
    period: int = 0

    def percentage_left(self) -> int:
        """Remaining requests as a percentage of the limit."""
        return self.remaining * 100 // self.limit

    def wait_time(self) -> timedelta:
        """The period divided by the limit."""
        return timedelta(seconds=self.period) / self.limit

    def wait_time_remaining(self) -> timedelta:
        """The period divided by the remaining requests."""
        if self.remaining < 2:
            return timedelta(seconds=self.period)
        return timedelta(seconds=self.period) / self.remaining


def _ignore_rate_limit(rate_limit: RateLimit) -> None:
    return None


def _atoi(value: str) -> int:
    return int(value) if _INTEGER.fullmatch(value) else 0


def parse_rate(resp: Any) -> RateLimit:
    """Read the rate limit headers of a response; missing or bad values are 0."""
    headers = resp.headers
    return RateLimit(
        limit=_atoi(headers.get(HEADER_RATE_LIMIT, "")),
        remaining=_atoi(headers.get(HEADER_RATE_REMAINING, "")),
        period=_atoi(headers.get(HEADER_RATE_PERIOD, "")),
    )


def check_response(resp: Any) -> None:
    """Raise ``RestError`` for a non-2xx response, carrying the API's message."""
    if 200 <= resp.status_code <= 299:
        return

    content = resp.content
    if not content:
        raise RestError(resp)

    data = json.loads(content)
    if data is None:
        raise RestError(resp)
    if not isinstance(data, dict):
        raise ValueError("error response body is not a JSON object")

    if "message" in data:
        raw = data["message"]
    else:
        raw = next((v for k, v in data.items() if k.lower() == "message"), None)
    if raw is not None and not isinstance(raw, str):
        raise ValueError("error response message is not a string")
    raise RestError(resp, raw or "")


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _decode(content: bytes) -> Any:
    text = content.decode("utf-8").lstrip()
    value, _ = json.JSONDecoder().raw_decode(text)
    return value


class Client:
    """Sends requests to the NS1 REST API and decodes the responses.

    ``http_client`` is any object with a ``send(prepared_request)`` method,
    such as a ``requests.Session``.
    """

    def __init__(
        self,
        http_client: Any = None,
        *,
        api_key: str = "",
        endpoint: str = DEFAULT_ENDPOINT,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limit_func: Optional[Callable[[RateLimit], None]] = None,
        follow_pagination: bool = DEFAULT_FOLLOW_PAGINATION,
        ddi: bool = False,
    ) -> None:
        self.http_client = http_client if http_client is not None else requests.Session()
        self.api_key = api_key
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.rate_limit_func = rate_limit_func or _ignore_rate_limit
        self.follow_pagination = follow_pagination
        self.ddi = ddi

    def new_request(self, method: str, path: str, body: Any = None) -> requests.PreparedRequest:
        """Build a request for ``path`` relative to the endpoint, with a JSON body."""
        url = urljoin(self.endpoint, path)
        data = None
        if body is not None:
            data = (json.dumps(body, default=_json_default) + "\n").encode("utf-8")
        headers = {HEADER_AUTH: self.api_key, "User-Agent": self.user_agent}
        return requests.Request(method, url, headers=headers, data=data).prepare()

    def do(self, request: Any, decode: bool = True) -> tuple[Any, Any]:
        """Send a request and return ``(decoded body or None, response)``.

        Transport errors propagate unchanged; non-2xx responses raise
        ``RestError``; an undecodable body raises ``json.JSONDecodeError``.
        """
        response = self.http_client.send(request)
        check_response(response)
        self.rate_limit_func(parse_rate(response))
        if not decode:
            return None, response
        return _decode(response.content), response

    def do_with_pagination(
        self,
        request: Any,
        next_page: Optional[Callable[[str], tuple[Any, Any]]] = None,
    ) -> tuple[Any, Any]:
        """Send a request and follow ``next`` Link headers, concatenating pages.

        ``next_page(uri)`` returns ``(items, response)`` for one further page;
        it defaults to ``get_uri``. The returned response is the last one seen.
        """
        fetch = next_page or self.get_uri
        value, response = self.do(request)

        force_https = urlsplit(self.endpoint).scheme == "https"
        next_uri = parse_link(response.headers.get("Link", ""), force_https).next()
        while next_uri:
            items, response = fetch(next_uri)
            if not isinstance(value, list):
                raise TypeError(
                    f"cannot append further pages to a value of type {type(value).__name__}"
                )
            value.extend(items)
            next_uri = parse_link(response.headers.get("Link", ""), force_https).next()
        return value, response

    def get_uri(self, uri: str) -> tuple[Any, Any]:
        """GET ``uri`` and return ``(decoded body, response)``."""
        return self.do(self.new_request("GET", uri, None))

    def rate_limit_strategy_sleep(self) -> None:
        """After each response, sleep for the remaining wait time."""

        def strategy(rate_limit: RateLimit) -> None:
            time.sleep(rate_limit.wait_time_remaining().total_seconds())

        self.rate_limit_func = strategy

    def rate_limit_strategy_concurrent(self, parallelism: int) -> None:
        """Sleep for wait time times ``parallelism`` once remaining drops to it."""

        def strategy(rate_limit: RateLimit) -> None:
            if rate_limit.remaining <= parallelism:
                time.sleep((rate_limit.wait_time() * parallelism).total_seconds())

        self.rate_limit_func = strategy