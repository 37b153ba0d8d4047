"""shopping_service 모듈 단위 테스트."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from app.services.shopping_service import (
    ShoppingAPIError,
    ShoppingConfigError,
    ShoppingConnectionError,
    ShoppingSearchError,
    ShoppingTimeoutError,
    map_shopping_results,
    search_shopping,
)

from conftest import make_settings


class TestMapShoppingResults:

    def test_full_item(self):
        items = [{
            "product_id": "123",
            "position": 1,
            "title": "Nike Sportswear Club T-Shirt",
            "price": "$25.00",
            "extracted_price": 25.0,
            "source": "Nike",
            "link": "https://example.com/p/123",
            "thumbnail": "https://example.com/t/123.jpg",
        }]
        match = map_shopping_results(items)[0]

        assert match.id == "123"
        assert match.title == "Nike Sportswear Club T-Shirt"
        assert match.price == "$25.00"
        assert match.store == "Nike"
        assert match.url == "https://example.com/p/123"
        assert match.image == "https://example.com/t/123.jpg"
        assert match.match is None

    def test_fallbacks(self):
        items = [
            {"position": 7, "extracted_price": 19.5, "domain": "shop.example", "product_link": "https://g.co/x"},
            {"extracted_price": "n/a"},
        ]
        first, second = map_shopping_results(items)

        assert first.id == 7
        assert first.price == "$19.50"
        assert first.store == "shop.example"
        assert first.url == "https://g.co/x"
        # id 는 인덱스로 대체
        assert second.id == 1
        assert second.price is None
        assert second.title is None

    def test_limit_keeps_order(self):
        items = [{"product_id": str(i)} for i in range(20)]
        matches = map_shopping_results(items, limit=12)

        assert [m.id for m in matches] == [str(i) for i in range(12)]

    def test_no_dedupe(self):
        items = [{"product_id": "same"}, {"product_id": "same"}]
        assert len(map_shopping_results(items)) == 2


class TestSearchShopping:

    def test_missing_key(self):
        with patch("app.services.shopping_service._fetch_json", new_callable=AsyncMock) as fetch:
            with pytest.raises(ShoppingConfigError, match="SERPAPI_KEY"):
                asyncio.run(search_shopping("Nike t-shirt buy", make_settings(SERPAPI_KEY=None)))
            fetch.assert_not_called()

    def test_request_params(self):
        data = {"shopping_results": [{"product_id": "a", "title": "A"}]}
        with patch("app.services.shopping_service._fetch_json", new_callable=AsyncMock, return_value=data) as fetch:
            matches = asyncio.run(search_shopping("Nike t-shirt buy", make_settings(SERPAPI_KEY="k")))

        url, params = fetch.call_args.args
        assert url == "https://serpapi.com/search.json"
        assert params == {
            "engine": "google_shopping",
            "q": "Nike t-shirt buy",
            "hl": "en",
            "gl": "us",
            "api_key": "k",
        }
        assert [m.id for m in matches] == ["a"]

    def test_no_results(self):
        with patch("app.services.shopping_service._fetch_json", new_callable=AsyncMock, return_value={}):
            assert asyncio.run(search_shopping("x buy", make_settings())) == []

class FakeResponse:
    """aiohttp 응답 대역."""

    def __init__(self, status, payload=None, text=""):
        self.status = status
        self.payload = payload
        self._text = text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self):
        return self._text

    async def json(self, content_type=None):
        return self.payload


class FakeSession:
    """aiohttp.ClientSession 대역. get() 에서 응답을 주거나 예외를 던진다."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def _search_with_session(session):
    with patch("app.services.shopping_service.aiohttp.ClientSession", return_value=session):
        return asyncio.run(search_shopping("Nike t-shirt buy", make_settings(SEARCH_TIMEOUT_SECONDS=5)))


class TestFetchJson:

    def test_success(self):
        session = FakeSession(FakeResponse(200, {"shopping_results": [{"product_id": "a", "price": "$9.99"}]}))
        matches = _search_with_session(session)

        assert [(m.id, m.price) for m in matches] == [("a", "$9.99")]
        url, params, timeout = session.requests[0]
        assert params["q"] == "Nike t-shirt buy"
        assert timeout.total == 5

    def test_error_status(self):
        session = FakeSession(FakeResponse(401, text='{"error": "Invalid API key"}'))
        with pytest.raises(ShoppingAPIError, match="SerpAPI failed: 401"):
            _search_with_session(session)

    def test_timeout(self):
        with pytest.raises(ShoppingTimeoutError, match="timeout after 5s"):
            _search_with_session(FakeSession(error=asyncio.TimeoutError()))

    def test_connection_error(self):
        error = aiohttp.ClientConnectionError("connection refused")
        with pytest.raises(ShoppingConnectionError, match="connection refused"):
            _search_with_session(FakeSession(error=error))

    def test_errors_share_base_class(self):
        with pytest.raises(ShoppingSearchError):
            _search_with_session(FakeSession(FakeResponse(500)))
