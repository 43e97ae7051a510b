# ns1rest

A Python client for the NS1 managed DNS REST API. It also includes a local
HTTPS mock of that API that you can use in your own tests.

## Installation

    pip install ns1rest

To run the test suite as well:

    pip install "ns1rest[test]"
    pytest

## Quick start

```python
from ns1rest.api import NS1Client

client = NS1Client(api_key="placeholder")
teams, response = client.teams.list()
```

`NS1Client` accepts the same keyword arguments as `ns1rest.client.Client`:
`api_key`, `endpoint` (the default is `https://api.nsone.net/v1/`),
`user_agent`, `rate_limit_func`, `follow_pagination` (the default is `True`)
and `ddi`. Its first positional argument is the HTTP client. This can be any
object that has a `send(prepared_request)` method. When it is omitted, a new
`requests.Session` is used.

Resources are plain dicts and lists, in the JSON shape the API uses.

- Methods that read data return `(data, response)`.
- `create` and `update` methods return the response. They also update the
  dict you passed in, in place, with the fields the API sent back.
- `delete` methods return the response.

## Services

`NS1Client` has these attributes:

| Attribute | Class | Endpoints |
|---|---|---|
| `settings` | `ns1rest.account.SettingsService` | `account/settings` |
| `warnings` | `ns1rest.account.WarningsService` | `account/usagewarnings` |
| `teams` | `ns1rest.account.TeamsService` | `account/teams` |
| `users` | `ns1rest.account.UsersService` | `account/users` |
| `data_sources` | `ns1rest.data.DataSourcesService` | `data/sources`, `feed/<id>` (`publish`) |
| `data_feeds` | `ns1rest.data.DataFeedsService` | `data/feeds` |
| `dnssec` | `ns1rest.dnssec.DNSSECService` | `zones/<zone>/dnssec` |
| `ipam` | `ns1rest.ipam.IPAMService` | `ipam/address` |

### DDI permissions

When `ddi=True`, the teams and users services send their bodies in the
permission layout of the DDI API. That layout always includes the
`security`, `dhcp` and `ipam` sections, filled with defaults where needed.
The conversion functions are `ns1rest.ddi.team_to_ddi_team` and
`ns1rest.ddi.user_to_ddi_user`.

### IPAM

The IPAM service provides these methods:

- `list_addrs()` and `get_children(addr_id)` follow pagination when
  `follow_pagination` is true.
- `get_subnet` and `get_parent`.
- `create_subnet(addr)` needs `prefix` and `network`. It raises `ValueError`
  if either is missing.
- `edit_subnet(addr, parent)` needs `id` and returns
  `(address, parent or None, response)`.
- `split_subnet(addr_id, prefix)` returns
  `(root address ID, new prefix IDs, response)`.
- `merge_subnet(root_id, merge_id)` and `delete_subnet(addr_id)`.

## Errors

Any response outside the 2xx range raises `ns1rest.client.RestError`. The
exception carries `response` and the API's `message`. Some well-known
failures are raised as more specific exceptions, each of which carries
`response`:

- From `ns1rest.account`: `TeamExistsError`, `TeamMissingError`,
  `UserExistsError` and `UserMissingError`.
- From `ns1rest.dnssec`: `ZoneMissingError` and `DNSSECNotEnabledError`.

A response body that is not valid JSON raises `json.JSONDecodeError`.
Transport errors from the HTTP client propagate unchanged.

## Low-level client

`ns1rest.client.Client` provides these methods:

- `new_request(method, path, body)` builds a prepared request. `path` is
  taken relative to the endpoint. `body` is encoded as JSON, and the
  `X-NSONE-Key` and `User-Agent` headers are set.
- `do(request, decode=True)` sends the request and returns
  `(decoded body or None, response)`.
- `do_with_pagination(request, next_page=None)` follows `next` Link headers
  and concatenates the pages of a list. Each further page is fetched with
  `next_page(uri)`, which defaults to `get_uri`.
- `get_uri(uri)` sends a GET request to a URI.

## Rate limits

Every successful response goes through the client's rate-limit function,
which receives a `RateLimit` read from the `X-Ratelimit-*` headers. By
default this function does nothing. Two strategies are built in:

- `Client.rate_limit_strategy_sleep()` sleeps for
  `RateLimit.wait_time_remaining()`.
- `Client.rate_limit_strategy_concurrent(parallelism)` sleeps for
  `wait_time() * parallelism`, but only when the remaining requests drop to
  `parallelism` or below.

`RateLimit` also has `percentage_left()`. To write your own strategy, use
`ns1rest.client.parse_rate` and `ns1rest.client.check_response`.

## Link headers

```python
from ns1rest.headers import parse_link

links = parse_link('<http://example.com/?page=2&limit=10>; rel="next"', True)
print(links.next())  # https://example.com/?page=2&limit=10
```

When the second argument is `True`, `http` links are rewritten to `https`.
The client does this automatically when its endpoint uses HTTPS.

## Mock service

`ns1rest.mock.MockService` starts an HTTPS server on `127.0.0.1`. The server
uses a freshly generated self-signed certificate.

- `address` is the server's `host:port`.
- `http_client` is a `requests.Session` that trusts the certificate.

```python
from ns1rest.api import NS1Client
from ns1rest.mock import MockService

with MockService() as mock:
    mock.add_test_case("GET", "ipam/address/1", 200, None, None, "", {"name": "a"})
    client = NS1Client(mock.http_client, endpoint=f"https://{mock.address}/v1/")
    address, _ = client.ipam.get_subnet(1)
    assert address["name"] == "a"
```

### Registering test cases

`add_test_case(method, uri, status, request_headers, response_headers,
request_body, response_body)` works as follows:

- URIs are taken relative to `/v1/`.
- Strings and bytes are sent and compared as they are.
- Other bodies are encoded as JSON, and a JSON request body matches any
  equivalent JSON.
- Requests must carry every registered request header value.
- Registering the same case twice raises `ValueError`.

Requests that match nothing get a 404 with a JSON message naming the reason:
`method`, `uri` or `no test`.

There are also zone helpers:

- `add_zone_list_test_case`
- `add_zone_get_test_case`
- `add_zone_create_test_case`
- `add_zone_update_test_case`
- `add_zone_delete_test_case`

The other methods are:

- `handle(method, uri, headers, body)` answers one request directly and
  returns `(status, headers, body)`.
- `clear_test_cases()` forgets every registered case.
- `shutdown()` stops the server. Leaving the `with` block does the same.

## What this package does not do

- The client has no services for zones, records, monitoring jobs,
  notification lists, statistics or API keys. The mock can answer zone
  requests, but you have to send them yourself with `Client.new_request`
  and `Client.do`.
- Resources are not typed model classes. They are plain dicts.
- There is no command-line tool.