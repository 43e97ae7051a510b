import copy
import re

import pytest
import requests

from ns1rest.client import Client
from ns1rest.mock import MockService


@pytest.fixture(scope="module")
def running():
    with MockService() as service:
        yield service


@pytest.fixture
def mock(running):
    running.clear_test_cases()
    return running


@pytest.fixture
def client(mock):
    return Client(mock.http_client, endpoint=f"https://{mock.address}/v1/")


def test_new_service_has_address_and_session():
    service = MockService()
    try:
        assert re.fullmatch(r"127\.0\.0\.1:\d+", service.address)
        response = service.http_client.get(
            f"https://{service.address}/v1/zones", timeout=5
        )
        assert response.status_code == 404
        assert response.json() == {"message": "request not found: method"}
    finally:
        service.shutdown()


def test_shutdown_stops_server():
    service = MockService()
    address = service.address
    service.shutdown()
    with pytest.raises(requests.ConnectionError):
        requests.get(f"https://{address}/v1/zones", timeout=2, verify=False)


def test_unknown_method(mock):
    status, headers, body = mock.handle("OPTIONS", "", None, b"")
    assert status == 404
    assert headers == []
    assert body == b'{"message": "request not found: method"}'


def test_unknown_uri(mock):
    mock.add_test_case("GET", "/test", 418, None, None, "", "")
    status, _, body = mock.handle("GET", "/test", None, b"")
    assert status == 404
    assert body == b'{"message": "request not found: uri"}'


def test_no_matching_test(mock):
    mock.add_test_case("GET", "/bad/body", 418, None, None, "", "")
    status, _, body = mock.handle("GET", "/v1/bad/body", None, b"body")
    assert status == 404
    assert body == b'{"message": "request not found: no test"}'


def test_header_match(mock):
    mock.add_test_case(
        "GET", "/request/header", 200, {"X-Test-Header": "test-value"}, None, "", "header match"
    )
    status, _, body = mock.handle(
        "GET", "/v1/request/header", {"x-test-header": "test-value"}, b""
    )
    assert status == 200
    assert body == b"header match"


def test_missing_header_is_not_matched(mock):
    mock.add_test_case(
        "GET", "/request/header", 200, {"X-Test-Header": "test-value"}, None, "", "header match"
    )
    status, _, body = mock.handle("GET", "/v1/request/header", {}, b"")
    assert status == 404
    assert body == b'{"message": "request not found: no test"}'


def test_body_match(mock):
    mock.add_test_case("GET", "/request/body", 200, None, None, "body", "body match")
    status, _, body = mock.handle("GET", "/v1/request/body", None, b"body")
    assert status == 200
    assert body == b"body match"


def test_json_body_matches_equivalent_json(mock):
    mock.add_test_case("PUT", "things", 201, None, None, {"a": 1, "b": [1, 2]}, {"ok": True})
    status, _, body = mock.handle("PUT", "/v1/things", None, b'{"b": [1, 2], "a": 1}')
    assert status == 201
    assert body == b'{"ok":true}'


def test_uri_is_normalized(mock):
    mock.add_test_case("GET", "test//x", 200, None, None, "", "found")
    assert mock.handle("GET", "/v1/test/x", None, b"") == (200, [], b"found")


def test_response_headers_are_returned(mock):
    mock.add_test_case("GET", "hdr", 200, None, {"Link": ["a", "b"]}, "", "")
    status, headers, _ = mock.handle("GET", "/v1/hdr", None, b"")
    assert status == 200
    assert headers == [("Link", "a"), ("Link", "b")]


def test_duplicate_test_case(mock):
    mock.add_test_case("GET", "test/header", 200, None, None, "", "")
    with pytest.raises(ValueError, match="test case already registered"):
        mock.add_test_case("GET", "test/header", 200, None, None, "", "")


def test_different_headers_are_distinct_cases(mock):
    mock.add_test_case("GET", "test/case", 200, None, None, "", "plain")
    mock.add_test_case("GET", "test/case", 202, {"X-Test": "1"}, None, "", "with header")
    assert mock.handle("GET", "/v1/test/case", None, b"")[2] == b"plain"


def test_unencodable_body(mock):
    with pytest.raises(ValueError, match="unable to convert response body"):
        mock.add_test_case("GET", "bad", 200, None, None, "", object())


def test_clear_test_cases(mock):
    mock.add_test_case("GET", "test/clear", 200, None, None, "", "")
    assert mock.handle("GET", "/v1/test/clear", {}, b"")[0] == 200
    mock.clear_test_cases()
    assert mock.handle("GET", "/v1/test/clear", {}, b"")[0] == 404


def test_example_zone_list_over_https(mock):
    ns1 = Client(mock.http_client, api_key="placeholder", endpoint=f"https://{mock.address}/v1/")
    mock.add_test_case(
        "GET", "zones", 200, {"X-NSONE-Key": "placeholder"}, None, "", [{"zone": "foo.bar"}]
    )
    zones, _ = ns1.do(ns1.new_request("GET", "zones", None))
    assert len(zones) == 1
    assert zones[0]["zone"] == "foo.bar"


def test_add_zone_list_test_case(mock, client):
    zones = [{"zone": "a.list.zone"}, {"zone": "b.list.zone"}, {"zone": "c.list.zone"}, {"zone": "d.list.zone"}]
    mock.add_zone_list_test_case(None, None, zones)
    result, _ = client.do(client.new_request("GET", "zones", None))
    assert [z["zone"] for z in result] == [z["zone"] for z in zones]


def test_add_zone_get_test_case(mock, client):
    zone = {"zone": "get.zone", "records": [{"domain": "a.get.zone"}, {"domain": "b.get.zone"}]}
    mock.add_zone_get_test_case(zone["zone"], None, None, zone)
    result, _ = client.do(client.new_request("GET", "zones/get.zone", None))
    assert result["zone"] == "get.zone"
    assert [r["domain"] for r in result["records"]] == ["a.get.zone", "b.get.zone"]


def test_add_zone_create_test_case(mock, client):
    zone = {"zone": "create.zone"}
    reply = copy.deepcopy(zone)
    reply["ttl"] = 42
    mock.add_zone_create_test_case(None, None, zone, reply)
    assert "ttl" not in zone
    data, response = client.do(client.new_request("PUT", "zones/create.zone", zone))
    zone.update(data)
    assert response.status_code == 201
    assert zone["ttl"] == reply["ttl"]


def test_add_zone_update_test_case(mock, client):
    zone = {"zone": "update.zone", "ttl": 42}
    mock.add_zone_update_test_case(None, None, zone, zone)
    data, response = client.do(client.new_request("POST", "zones/update.zone", zone))
    assert response.status_code == 200
    assert data == zone


def test_add_zone_delete_test_case(mock, client):
    mock.add_zone_delete_test_case("delete.zone", None, None)
    _, response = client.do(client.new_request("DELETE", "zones/delete.zone", None), decode=False)
    assert response.status_code == 204