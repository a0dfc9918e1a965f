"""XmlRpcTransportのテスト"""

import xmlrpc.client

import httpx
import pytest

from src.domain.exceptions import ProtocolError, RpcError, TransportError
from src.infrastructure.xmlrpc_transport import XmlRpcTransport

ENDPOINT = "https://rpc.example/xml-rpc"


def xml_response(value) -> httpx.Response:
    body = xmlrpc.client.dumps((value,), methodresponse=True, allow_none=True)
    return httpx.Response(200, content=body.encode("utf-8"))


def make_transport(handler) -> XmlRpcTransport:
    return XmlRpcTransport(
        endpoint=ENDPOINT,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestXmlRpcTransport:
    """XmlRpcTransportのテスト"""

    def test_round_trip(self) -> None:
        """リクエストを XML-RPC で送り、戻り値を復元"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            params, method = xmlrpc.client.loads(request.content)
            seen["method"] = method
            seen["params"] = params
            seen["url"] = str(request.url)
            return xml_response({"status": "200 OK", "token": "tok-1"})

        result = make_transport(handler).call("LogIn", ("alice", "secret", "en", "Agent"))

        assert result == {"status": "200 OK", "token": "tok-1"}
        assert seen == {
            "method": "LogIn",
            "params": ("alice", "secret", "en", "Agent"),
            "url": ENDPOINT,
        }

    def test_endpoint_override(self) -> None:
        urls = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return xml_response({"status": "200 OK"})

        make_transport(handler).call("NoOperation", ("tok",), endpoint="https://other/xml-rpc")
        assert urls == ["https://other/xml-rpc"]

    def test_http_error(self) -> None:
        """非2xx は TransportError"""
        transport = make_transport(lambda request: httpx.Response(503))
        with pytest.raises(TransportError, match="503"):
            transport.call("LogIn", ())

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="ConnectError"):
            make_transport(handler).call("LogIn", ())

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError):
            make_transport(handler).call("LogIn", ())

    def test_fault(self) -> None:
        """XML-RPC fault は RpcError"""

        def handler(request: httpx.Request) -> httpx.Response:
            body = xmlrpc.client.dumps(xmlrpc.client.Fault(4, "Too many parameters"), methodresponse=True)
            return httpx.Response(200, content=body.encode("utf-8"))

        with pytest.raises(RpcError) as exc_info:
            make_transport(handler).call("SearchSubtitles", ("tok",))

        assert exc_info.value.method == "SearchSubtitles"
        assert exc_info.value.code == 4
        assert exc_info.value.message == "Too many parameters"

    def test_malformed_xml(self) -> None:
        """XML でなければ ProtocolError"""
        transport = make_transport(lambda request: httpx.Response(200, content=b"not xml at all"))
        with pytest.raises(ProtocolError):
            transport.call("LogIn", ())
