import httpx
import pytest

from edgecert_core import ConfigurationError, ResolutionError
from edgecert_core.public_ip import discover_public_ip, parse_ipv4, validate_server_ip


def _client(handler) -> httpx.Client:  # noqa: ANN001
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_first_service_answer_wins() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text="203.0.113.9\n")

    identity = discover_public_ip(["https://one.test/ip", "https://two.test/ip"], client=_client(handler))

    assert identity.public_ip == "203.0.113.9"
    assert identity.source == "https://one.test/ip"
    assert seen == ["https://one.test/ip"]


def test_falls_back_on_errors_and_garbage() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "down.test":
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.host == "html.test":
            return httpx.Response(200, text="<html>nope</html>")
        if request.url.host == "error.test":
            return httpx.Response(503, text="busy")
        return httpx.Response(200, text="198.51.100.4")

    identity = discover_public_ip(
        ["https://down.test", "https://html.test", "https://error.test", "https://ok.test"],
        client=_client(handler),
    )

    assert identity.public_ip == "198.51.100.4"
    assert identity.source == "https://ok.test"


def test_all_services_failing_raises_resolution_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ResolutionError) as excinfo:
        discover_public_ip(["https://a.test", "https://b.test"], client=_client(handler))

    assert excinfo.value.target == "public-ip"
    assert "a.test" in str(excinfo.value)


def test_no_services_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        discover_public_ip([])


def test_parse_ipv4_rejects_ipv6() -> None:
    assert parse_ipv4(" 203.0.113.9 ") == "203.0.113.9"
    assert parse_ipv4("2001:db8::1") is None


def test_validate_server_ip() -> None:
    assert validate_server_ip(" 203.0.113.9 ").public_ip == "203.0.113.9"
    with pytest.raises(ConfigurationError):
        validate_server_ip("example.com")
