"""A local HTTPS server that emulates the NS1 API for tests."""

from __future__ import annotations

import dataclasses
import ipaddress
import json
import socketserver
import ssl
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

HeaderValues = Union[str, Iterable[str]]
Headers = Optional[Mapping[str, HeaderValues]]


def _not_found(reason: str) -> tuple[int, list[tuple[str, str]], bytes]:
    return 404, [], f'{{"message": "request not found: {reason}"}}'.encode()


def _normalize_headers(headers: Headers) -> Optional[dict[str, list[str]]]:
    """Lower-case the names and turn every value into a list of strings."""
    if headers is None:
        return None
    result: dict[str, list[str]] = {}
    for key, values in headers.items():
        items = [values] if isinstance(values, str) else list(values)
        result.setdefault(key.lower(), []).extend(items)
    return result


def _headers_match(expected: Optional[dict[str, list[str]]], actual: dict[str, list[str]]) -> bool:
    """Every expected header is present with at least every expected value."""
    for key, values in (expected or {}).items():
        if key not in actual:
            return False
        if any(value not in actual[key] for value in values):
            return False
    return True


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _convert_body(body: Any) -> tuple[bytes, bool]:
    """Return the body as bytes and whether it was encoded as JSON."""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body), False
    if isinstance(body, str):
        return body.encode("utf-8"), False
    return json.dumps(body, default=_json_default, separators=(",", ":")).encode("utf-8"), True


def _json_equal(expected: bytes, actual: bytes) -> bool:
    try:
        return json.loads(expected) == json.loads(actual)
    except ValueError:
        return False


@dataclass
class _TestCase:
    status: int
    request_headers: Optional[dict[str, list[str]]]
    request_body: bytes
    request_json: bool
    response_headers: list[tuple[str, str]]
    response_body: bytes

    def body_matches(self, body: bytes) -> bool:
        if self.request_json:
            return _json_equal(self.request_body, body)
        return self.request_body == body


def _write_certificate(directory: Path) -> Path:
    """Write a self-signed certificate and its key for 127.0.0.1 to one PEM file."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName(
                [x509.DNSName("localhost"), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]
            ),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .sign(key, hashes.SHA256())
    )
    path = directory / "server.pem"
    path.write_bytes(
        certificate.public_bytes(serialization.Encoding.PEM)
        + key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
    )
    return path


class _Handler(BaseHTTPRequestHandler):
    server_version = "mockns1"

    def _dispatch(self) -> None:
        try:
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length > 0 else b""
        except (ValueError, OSError) as err:
            status, headers = 500, []
            payload = json.dumps({"message": f"unable to read request body: {err}"}).encode()
        else:
            received: dict[str, list[str]] = {}
            for key, value in self.headers.items():
                received.setdefault(key, []).append(value)
            status, headers, payload = self.server.service.handle(
                self.command, self.path, received, body
            )

        self.send_response(status)
        for key, value in headers:
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        return None


for _method in ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"):
    setattr(_Handler, f"do_{_method}", _Handler._dispatch)


class _Server(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, service: "MockService") -> None:
        self.service = service
        super().__init__(("127.0.0.1", 0), _Handler)

    def server_bind(self) -> None:
        socketserver.TCPServer.server_bind(self)
        host, port = self.server_address[:2]
        self.server_name = host
        self.server_port = port


class MockService:
    """A running HTTPS server that answers registered test cases.

    ``address`` is the ``host:port`` the server listens on and
    ``http_client`` a ``requests.Session`` that trusts its certificate.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tests: dict[str, dict[str, list[_TestCase]]] = {}
        self._tmp = tempfile.TemporaryDirectory()
        cert_path = _write_certificate(Path(self._tmp.name))

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(str(cert_path))

        self._server = _Server(self)
        self._server.socket = context.wrap_socket(self._server.socket, server_side=True)
        host, port = self._server.server_address[:2]
        self.address = f"{host}:{port}"

        self.http_client = requests.Session()
        self.http_client.verify = str(cert_path)
        self.http_client.trust_env = False

        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        self._closed = False

    def __enter__(self) -> "MockService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def handle(
        self, method: str, uri: str, headers: Headers = None, body: bytes = b""
    ) -> tuple[int, list[tuple[str, str]], bytes]:
        """Answer one request: return ``(status, headers, body)``.

        Unknown methods, URIs and unmatched requests get a 404 with a JSON
        message naming the reason.
        """
        with self._lock:
            by_uri = self._tests.get(method)
            if by_uri is None:
                return _not_found("method")
            cases = by_uri.get(uri)
            if cases is None:
                return _not_found("uri")
            cases = list(cases)

        received = _normalize_headers(headers) or {}
        for case in cases:
            if case.body_matches(body) and _headers_match(case.request_headers, received):
                return case.status, list(case.response_headers), case.response_body
        return _not_found("no test")

    def add_test_case(
        self,
        method: str,
        uri: str,
        status: int,
        request_headers: Headers = None,
        response_headers: Headers = None,
        request_body: Any = "",
        response_body: Any = "",
    ) -> None:
        """Register a response for a request.

        ``uri`` is taken relative to ``/v1/``. Bytes and strings are sent
        and compared as they are; anything else is encoded as JSON, and a
        JSON request body matches any equivalent JSON. Raises ``ValueError``
        if a body cannot be encoded or the same case is already registered.
        """
        if not uri.startswith("/v1/"):
            uri = "/v1/" + uri
        uri = uri.replace("//", "/")

        try:
            req_body, req_json = _convert_body(request_body)
        except (TypeError, ValueError) as err:
            raise ValueError(f"unable to convert request body to bytes: {err}") from err
        try:
            resp_body, _ = _convert_body(response_body)
        except (TypeError, ValueError) as err:
            raise ValueError(f"unable to convert response body to bytes: {err}") from err

        resp_headers = [
            (key, value)
            for key, values in (response_headers or {}).items()
            for value in ([values] if isinstance(values, str) else values)
        ]
        case = _TestCase(
            status=status,
            request_headers=_normalize_headers(request_headers),
            request_body=req_body,
            request_json=req_json,
            response_headers=resp_headers,
            response_body=resp_body,
        )

        with self._lock:
            cases = self._tests.setdefault(method, {}).setdefault(uri, [])
            for existing in cases:
                if (
                    existing.request_headers == case.request_headers
                    and existing.request_body == case.request_body
                ):
                    raise ValueError("test case already registered")
            cases.append(case)

    def clear_test_cases(self) -> None:
        """Remove every registered test case."""
        with self._lock:
            self._tests = {}

    def shutdown(self) -> None:
        """Stop the server and release its resources."""
        if self._closed:
            return
        self._closed = True
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()
        self.http_client.close()
        self._tmp.cleanup()

    def add_zone_list_test_case(
        self, request_headers: Headers, response_headers: Headers, response: Any
    ) -> None:
        """Register the reply to listing zones."""
        self.add_test_case("GET", "/zones", 200, request_headers, response_headers, "", response)

    def add_zone_get_test_case(
        self, name: str, request_headers: Headers, response_headers: Headers, response: Any
    ) -> None:
        """Register the reply to fetching the zone ``name``."""
        self.add_test_case(
            "GET", f"/zones/{name}", 200, request_headers, response_headers, "", response
        )

    def add_zone_create_test_case(
        self, request_headers: Headers, response_headers: Headers, zone: Mapping, response: Any
    ) -> None:
        """Register the reply to creating ``zone``."""
        self.add_test_case(
            "PUT", f"/zones/{zone['zone']}", 201, request_headers, response_headers, zone, response
        )

    def add_zone_update_test_case(
        self, request_headers: Headers, response_headers: Headers, zone: Mapping, response: Any
    ) -> None:
        """Register the reply to updating ``zone``."""
        self.add_test_case(
            "POST", f"/zones/{zone['zone']}", 200, request_headers, response_headers, zone, response
        )

    def add_zone_delete_test_case(
        self, name: str, request_headers: Headers, response_headers: Headers
    ) -> None:
        """Register the reply to deleting the zone ``name``."""
        self.add_test_case(
            "DELETE", f"/zones/{name}", 204, request_headers, response_headers, "", ""
        )