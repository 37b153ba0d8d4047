"""
SerpAPI (Google Shopping) 검색 어댑터
검색어 -> 정규화된 MatchItem 목록 (최대 MAX_MATCHES개, 원래 순위 유지)
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from app.core.config import Settings
from app.schemas.scan import MatchItem

logger = logging.getLogger(__name__)

ENGINE = "google_shopping"


async def search_shopping(query: str, settings: Settings) -> List[MatchItem]:
    """검색어로 상품을 찾아 MatchItem 목록 반환"""
    api_key = settings.SERPAPI_KEY
    if not api_key:
        raise ShoppingConfigError("Missing SERPAPI_KEY")

    params = {
        "engine": ENGINE,
        "q": query,
        "hl": settings.SEARCH_LANGUAGE,
        "gl": settings.SEARCH_COUNTRY,
        "api_key": api_key,
    }
    data = await _fetch_json(settings.SERPAPI_URL, params, timeout=settings.SEARCH_TIMEOUT_SECONDS)
    items = (data.get("shopping_results") if isinstance(data, dict) else None) or []
    matches = map_shopping_results(items, limit=settings.MAX_MATCHES)
    logger.info(f"SerpAPI 검색 완료: q={query!r}, results={len(items)}, matches={len(matches)}")
    return matches


async def _fetch_json(url: str, params: Dict[str, Any], timeout: int) -> Dict[str, Any]:
    async with aiohttp.ClientSession() as session:
        try:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                if resp.status >= 400:
                    # 상세는 DEBUG (api_key가 URL에 포함되므로 URL은 남기지 않음)
                    logger.debug(f"SerpAPI error {resp.status}: {await resp.text()}")
                    raise ShoppingAPIError(f"SerpAPI failed: {resp.status}")
                return await resp.json(content_type=None)
        except asyncio.TimeoutError:
            raise ShoppingTimeoutError(f"SerpAPI request timeout after {timeout}s")
        except aiohttp.ClientError as e:
            raise ShoppingConnectionError(f"SerpAPI connection failed: {e}")


def map_shopping_results(items: List[Dict[str, Any]], limit: int = 12) -> List[MatchItem]:
    """SerpAPI shopping_results -> MatchItem (중복 제거 없음)"""
    matches: List[MatchItem] = []
    for i, it in enumerate(items[:limit]):
        matches.append(MatchItem(
            id=_first(it.get("product_id"), it.get("position"), i),
            title=it.get("title"),
            price=_format_price(it),
            store=_first(it.get("source"), it.get("domain")),
            url=_first(it.get("link"), it.get("product_link")),
            image=it.get("thumbnail"),
        ))
    return matches


def _format_price(item: Dict[str, Any]) -> Optional[str]:
    price = item.get("price")
    if price is not None:
        return price
    extracted = item.get("extracted_price")
    if isinstance(extracted, (int, float)) and not isinstance(extracted, bool):
        return f"${extracted:.2f}"
    return None


def _first(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None


# 커스텀 예외 클래스들
class ShoppingSearchError(Exception):
    """쇼핑 검색 기본 예외"""
    pass

class ShoppingConfigError(ShoppingSearchError):
    """API 키 미설정"""
    pass

class ShoppingAPIError(ShoppingSearchError):
    """API 응답 에러"""
    pass

class ShoppingTimeoutError(ShoppingSearchError):
    """타임아웃"""
    pass

class ShoppingConnectionError(ShoppingSearchError):
    """연결 실패"""
    pass
