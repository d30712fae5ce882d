import asyncio
import base64
import json

import aiohttp
import pytest

from easydeploy.common.errors import UpstreamServiceError, ValidationError
from easydeploy.services.logo_storage import LogoStorage, decode_logo
from easydeploy.services.prices import PriceService
from easydeploy.services.quotes import OneInchClient, swap_link
from easydeploy.services.token_generator import TokenSpec, extract_json


class _FakeResponse:
    def __init__(self, status, payload, text=None):
        self.status = status
        self.payload = payload
        self._text = text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self, content_type=None):
        if self._text is not None:
            return json.loads(self._text)
        return self.payload

    async def text(self):
        return self._text if self._text is not None else str(self.payload)


class _FakeSession:
    """Records requests and answers from a url -> response (or exception) table"""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def _answer(self, url):
        if url not in self.routes:
            raise aiohttp.ClientConnectionError(f"cannot connect to {url}")
        answer = self.routes[url]
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, _FakeResponse):
            return answer
        return _FakeResponse(*answer)

    def get(self, url, params=None):
        self.requests.append((url, params))
        return self._answer(url)

    def post(self, url, data=None, headers=None):
        self.requests.append((url, headers))
        return self._answer(url)


def test_extract_json_strict_and_embedded():
    assert extract_json('{"name": "A", "symbol": "A"}') == {"name": "A", "symbol": "A"}
    assert extract_json('Here you go:\n```json\n{"name": "B"}\n```') == {"name": "B"}
    with pytest.raises(UpstreamServiceError):
        extract_json("no json here")


def test_token_spec_defaults_and_bounds():
    spec = TokenSpec.model_validate({"name": "Coffee", "symbol": "CAFE"})
    assert spec.type == "ERC20" and spec.decimals == 18 and spec.features.mintable is False
    with pytest.raises(Exception):
        TokenSpec.model_validate({"name": "Coffee", "symbol": "CAFE", "type": "ERC777"})


def test_decode_logo_variants():
    raw = b"\x89PNG"
    encoded = base64.b64encode(raw).decode()
    assert decode_logo("cafe", image_base64="data:image/png;base64," + encoded) == ("cafe.png", raw, "image/png")
    assert decode_logo(None, image_base64=encoded)[0] == "logo.png"
    assert decode_logo("cafe", image_svg="<svg/>") == ("cafe.svg", b"<svg/>", "image/svg+xml")
    with pytest.raises(ValidationError, match="not valid base64"):
        decode_logo("cafe", image_base64="@@@")
    with pytest.raises(ValidationError):
        decode_logo("cafe")


def test_swap_link():
    assert swap_link("0xabc", 1) == "https://app.1inch.io/#/1/swap/ETH/0xabc"
    assert swap_link() == "https://app.1inch.io/#/137/swap/ETH/"


def test_oneinch_quote_forwards_params():
    session = _FakeSession({"https://api.1inch.io/v5.0/137/quote": (200, {"toTokenAmount": "42"})})
    client = OneInchClient()

    data = asyncio.run(client.quote("0xfrom", "0xto", amount="5", chain_id="137", session=session))

    assert data == {"toTokenAmount": "42"}
    assert session.requests == [(
        "https://api.1inch.io/v5.0/137/quote",
        {"fromTokenAddress": "0xfrom", "toTokenAddress": "0xto", "amount": "5"},
    )]


def test_oneinch_quote_http_error():
    session = _FakeSession({"https://api.1inch.io/v5.0/1/quote": (400, {"error": "insufficient liquidity"})})
    with pytest.raises(UpstreamServiceError, match="HTTP 400") as exc_info:
        asyncio.run(OneInchClient().quote("0xfrom", "0xto", session=session))
    assert "insufficient liquidity" in exc_info.value.details


def test_price_from_pyth_when_configured():
    session = _FakeSession({"https://hermes.example/v2/price/latest/0xeth": (200, {"price": {"price": "3120"}})})
    service = PriceService(hermes_url="https://hermes.example/", product_id="0xeth")

    result = asyncio.run(service.latest(session=session))

    assert result == {"source": "pyth_hermes", "raw": {"price": {"price": "3120"}}}


def test_price_falls_back_to_coingecko():
    session = _FakeSession({
        "https://api.coingecko.com/api/v3/simple/price": (200, {"ethereum": {"usd": 3120.5}}),
    })
    result = asyncio.run(PriceService().latest(session=session))
    assert result == {"source": "coingecko", "price": 3120.5}
    assert session.requests[0][1] == {"ids": "ethereum", "vs_currencies": "usd"}


def test_price_connection_error_is_upstream_error():
    with pytest.raises(UpstreamServiceError, match="CoinGecko request failed"):
        asyncio.run(PriceService().latest(session=_FakeSession({})))


def test_price_timeout_is_upstream_error():
    session = _FakeSession({"https://api.coingecko.com/api/v3/simple/price": asyncio.TimeoutError()})
    with pytest.raises(UpstreamServiceError, match="CoinGecko request timed out"):
        asyncio.run(PriceService().latest(session=session))


def test_non_json_body_is_upstream_error():
    page = "<html><body>502 Bad Gateway</body></html>"
    session = _FakeSession({
        "https://api.coingecko.com/api/v3/simple/price": _FakeResponse(200, None, text=page),
    })
    with pytest.raises(UpstreamServiceError, match="non-JSON body") as exc_info:
        asyncio.run(PriceService().latest(session=session))
    assert exc_info.value.details == page


def test_logo_upload_timeout_is_upstream_error():
    session = _FakeSession({"https://api.nft.storage/upload": asyncio.TimeoutError()})
    with pytest.raises(UpstreamServiceError, match="timed out"):
        asyncio.run(LogoStorage("key").upload_logo("cafe", None, image_svg="<svg/>", session=session))


@pytest.mark.parametrize("response", [
    _FakeResponse(200, None, text="not json"),
    _FakeResponse(200, ["ok"]),
    _FakeResponse(200, {"ok": True, "value": {}}),
    _FakeResponse(401, {"ok": False, "error": {"message": "unauthorized"}}),
])
def test_logo_upload_bad_response_is_upstream_error(response):
    session = _FakeSession({"https://api.nft.storage/upload": response})
    with pytest.raises(UpstreamServiceError):
        asyncio.run(LogoStorage("key").upload_logo("cafe", None, image_svg="<svg/>", session=session))


def test_logo_upload_sends_bearer_key():
    session = _FakeSession({"https://api.nft.storage/upload": (200, {"ok": True, "value": {"cid": "bafyx"}})})
    stored = asyncio.run(LogoStorage("secret").upload_logo("cafe", None, image_svg="<svg/>", session=session))
    assert stored["imageUri"] == "ipfs://bafyx/cafe.svg"
    assert session.requests[0][1] == {"Authorization": "Bearer secret"}
