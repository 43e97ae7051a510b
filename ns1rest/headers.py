"""Parsing of HTTP ``Link`` headers used for API pagination."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

_COMMA = re.compile(r",\s*")
_VALUE_COMMA = re.compile(r'([^"]),')
_EQUAL = re.compile(r" *= *")
_KEY = re.compile(r"[a-z*]+")
_LINK = re.compile(r"\A<(.+)>;(.+)\Z")
_SEMI = re.compile(r"; +")
_VAL = re.compile(r'"+([^"]+)"+')
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


@dataclass
class Link:
    """A single entry of a Link header: its URI, relation and extra attributes."""

    uri: str
    rel: str = ""
    extra: dict[str, str] = field(default_factory=dict)


class Links(dict):
    """Links of a Link header, keyed by their ``rel`` attribute."""

    def next(self) -> str:
        """Return the URI of the ``next`` link, or an empty string."""
        link = self.get("next")
        return link.uri if link is not None else ""


def _request_uri(raw: str, force_https: bool) -> str:
    """Validate ``raw`` as an absolute URI or absolute path; return '' if invalid."""
    if _CONTROL.search(raw):
        return ""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return ""
    if not parts.scheme and not raw.startswith("/"):
        return ""
    if force_https and parts.scheme == "http":
        return parts._replace(scheme="https").geturl()
    return raw


def parse_link(value: str, force_https: bool) -> Links:
    """Parse a Link header value.

    Returns an empty ``Links`` when the header is empty or any entry is not
    of the form ``<uri>; attributes``. With ``force_https`` any ``http`` URI
    is rewritten to ``https``. Raises ``ValueError`` for attributes that
    lack a quoted value.
    """
    if not value:
        return Links()

    links = Links()
    value = _VALUE_COMMA.sub(r"\1", value)

    for entry in _COMMA.split(value):
        match = _LINK.search(entry)
        if match is None:
            return Links()

        link = Link(uri=_request_uri(match.group(1), force_https))

        for extra in _SEMI.split(match.group(2)):
            pair = _EQUAL.split(extra)
            if len(pair) < 2:
                raise ValueError(f"malformed link attribute: {extra!r}")
            key_match = _KEY.search(pair[0])
            key = key_match.group(0) if key_match else ""
            val_match = _VAL.search(pair[1])
            if val_match is None:
                raise ValueError(f"unquoted link attribute value: {extra!r}")
            val = val_match.group(1)

            if key == "rel":
                first, *rest = val.split(" ")
                rels = [first, *(v for v in rest if not v.startswith("http"))]
                rel = " ".join(rels)
                link.rel = rel
                links[rel] = link
            else:
                link.extra[key] = val

    return links