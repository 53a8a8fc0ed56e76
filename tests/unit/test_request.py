r"""Unit tests for the fluent request descriptor."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from arelay.exceptions import RequestConstructionError
from arelay.request import Request

if TYPE_CHECKING:
    from collections.abc import Generator

HOST = "http://localhost:3000"


@pytest.fixture
def http_client() -> Generator[httpx.Client, None, None]:
    with httpx.Client() as client:
        yield client


#############################
#     Tests for url()       #
#############################


def test_request_url_path_and_queries() -> None:
    request = (
        Request(host=HOST)
        .path("/orders/%d", 1231)
        .add_query("clientId", "1231321")
        .add_query("deviceId", "45555")
    )
    assert request.url() == "http://localhost:3000/orders/1231?clientId=1231321&deviceId=45555"


def test_request_url_add_query_is_cumulative() -> None:
    request = Request(host=HOST).add_query("id", "1").add_query("id", "2")
    assert request.url() == "http://localhost:3000?id=1&id=2"


def test_request_url_set_query_replaces_values() -> None:
    request = Request(host=HOST).add_query("id", "1").set_query("id", "2")
    assert request.url() == "http://localhost:3000?id=2"


def test_request_url_keys_keep_first_use_order() -> None:
    request = (
        Request(host=HOST)
        .add_query("b", "1")
        .add_query("a", "2")
        .add_query("b", "3")
    )
    assert request.url() == "http://localhost:3000?b=1&b=3&a=2"


def test_request_url_add_query_multiple_values() -> None:
    request = Request(host=HOST).add_query("tag", "x", "y")
    assert request.query == {"tag": ["x", "y"]}
    assert request.url() == "http://localhost:3000?tag=x&tag=y"


def test_request_url_encodes_values() -> None:
    request = Request(host=HOST).path("/search").add_query("q", "a b&c")
    assert request.url() == "http://localhost:3000/search?q=a+b%26c"


def test_request_url_without_query() -> None:
    assert Request(host=HOST).path("/orders").url() == "http://localhost:3000/orders"


def test_request_url_keeps_query_from_path() -> None:
    request = Request(host=HOST).path("/orders?page=2").add_query("size", "10")
    assert request.url() == "http://localhost:3000/orders?page=2&size=10"


def test_request_url_path_without_args_is_not_formatted() -> None:
    assert Request(host=HOST).path("/100%").url() == "http://localhost:3000/100%"


def test_request_url_is_idempotent() -> None:
    request = Request(host=HOST).path("/orders").add_query("id", "1")
    assert request.url() == request.url()
    assert request.query == {"id": ["1"]}


def test_request_url_default_host() -> None:
    request = Request().path("/orders")
    assert request.url(default_host=HOST) == "http://localhost:3000/orders"


def test_request_url_own_host_wins_over_default() -> None:
    request = Request(host="https://api.example.com").path("/orders")
    assert request.url(default_host=HOST) == "https://api.example.com/orders"


def test_request_host_overrides_constructor_host() -> None:
    request = Request(host=HOST).host("https://api.example.com")
    assert request.host_name == "https://api.example.com"


@pytest.mark.parametrize(
    "host",
    [
        pytest.param("local:host:3000", id="no scheme"),
        pytest.param("http://localhost:abc", id="invalid port"),
        pytest.param("http://localhost:99999", id="port out of range"),
        pytest.param("ftp://localhost", id="unsupported scheme"),
        pytest.param("http://", id="missing hostname"),
    ],
)
def test_request_url_malformed_host(host: str) -> None:
    request = Request(host=host).path("/orders")
    with pytest.raises(RequestConstructionError, match=r"malformed URL"):
        request.url()


def test_request_url_missing_host() -> None:
    with pytest.raises(RequestConstructionError, match=r"malformed URL"):
        Request().path("/orders").url()


def test_request_raw_url_skips_validation() -> None:
    request = Request(host="http://localhost:abc").path("/orders").add_query("id", "1")
    assert request.raw_url() == "http://localhost:abc/orders"


def test_request_raw_url_default_host() -> None:
    assert Request().path("/orders").raw_url(default_host=HOST) == "http://localhost:3000/orders"


####################################
#     Tests for the setters        #
####################################


def test_request_defaults() -> None:
    request = Request()
    assert request.method_name == "GET"
    assert request.host_name is None
    assert request.query == {}
    assert request.headers == {}
    assert request.content == b""


def test_request_setters_are_chainable() -> None:
    request = Request()
    assert request.host(HOST) is request
    assert request.method("post") is request
    assert request.path("/a") is request
    assert request.body(b"x") is request
    assert request.mutate(lambda _: None) is request


def test_request_method_is_upper_cased() -> None:
    assert Request(method="post").method_name == "POST"
    assert Request().method("delete").method_name == "DELETE"


def test_request_headers_set_and_add() -> None:
    request = (
        Request()
        .add_header("Accept", "application/json")
        .add_header("Accept", "text/xml")
        .set_header("X-Token", "a")
        .set_header("X-Token", "b")
    )
    assert request.headers == {"Accept": ["application/json", "text/xml"], "X-Token": ["b"]}


def test_request_headers_returns_a_copy() -> None:
    request = Request().set_header("X-Token", "a")
    request.headers["X-Token"].append("b")
    assert request.headers == {"X-Token": ["a"]}


def test_request_body_text_is_utf8_encoded() -> None:
    assert Request().body("héllo").content == "héllo".encode()


def test_request_repr() -> None:
    assert repr(Request(host=HOST).path("/a")) == (
        "Request(method='GET', host='http://localhost:3000', path='/a')"
    )


##############################
#     Tests for build()      #
##############################


def test_request_build(http_client: httpx.Client) -> None:
    wire = (
        Request(host=HOST, method="PUT")
        .path("/orders/%d", 7)
        .add_query("v", "1")
        .add_header("Accept", "application/json")
        .add_header("Accept", "text/xml")
        .body(b'{"id": 7}')
        .build(http_client)
    )
    assert wire.method == "PUT"
    assert str(wire.url) == "http://localhost:3000/orders/7?v=1"
    assert wire.headers.get_list("Accept") == ["application/json", "text/xml"]
    assert wire.content == b'{"id": 7}'


def test_request_build_uses_default_host(http_client: httpx.Client) -> None:
    wire = Request().path("/orders").build(http_client, default_host=HOST)
    assert str(wire.url) == "http://localhost:3000/orders"


def test_request_build_returns_new_request_each_time(http_client: httpx.Client) -> None:
    request = Request(host=HOST)
    first = request.build(http_client)
    first.headers["X-Retry"] = "1"
    second = request.build(http_client)
    assert first is not second
    assert "X-Retry" not in second.headers


def test_request_build_applies_mutators_in_order(http_client: httpx.Client) -> None:
    def first(request: httpx.Request) -> None:
        request.headers["X-Trace"] = "first"

    def second(request: httpx.Request) -> None:
        request.headers["X-Trace"] += ",second"

    wire = Request(host=HOST).mutate(first).mutate(second).build(http_client)
    assert wire.headers["X-Trace"] == "first,second"


def test_request_build_basic_auth(http_client: httpx.Client) -> None:
    wire = Request(host=HOST).set_basic_auth("test", "test").build(http_client)
    assert wire.headers["Authorization"] == "Basic dGVzdDp0ZXN0"


@pytest.mark.parametrize("method", [",", "GET POST", "", "GÉT"])
def test_request_build_invalid_method(http_client: httpx.Client, method: str) -> None:
    with pytest.raises(RequestConstructionError, match=r"invalid HTTP method"):
        Request(host=HOST, method=method).build(http_client)


def test_request_build_malformed_host(http_client: httpx.Client) -> None:
    with pytest.raises(RequestConstructionError):
        Request(host="local:host:3000").build(http_client)
