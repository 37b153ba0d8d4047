"""
Outfit attribute extraction on top of Google Cloud Vision:
- Run logo / label / text / web-entity / object / image-property detection concurrently
- Reduce the raw annotations into a compact AttributeRecord
  (brand, category, colors, patterns, raw texts)

Every lookup table below is ordered; table order is match priority.
"""
from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from app.core.vision_client import FEATURE_METHODS, VisionCapabilities

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]

# keyword (lowercase) -> canonical brand name
BRAND_KEYWORDS: Dict[str, str] = {
    "nike": "Nike",
    "jordan": "Jordan",
    "adidas": "Adidas",
    "puma": "Puma",
    "under armour": "Under Armour",
    "new balance": "New Balance",
    "reebok": "Reebok",
    "converse": "Converse",
    "vans": "Vans",
    "north face": "The North Face",
    "patagonia": "Patagonia",
    "columbia": "Columbia",
    "carhartt": "Carhartt",
    "champion": "Champion",
    "lululemon": "Lululemon",
    "levi": "Levi's",
    "ralph lauren": "Ralph Lauren",
    "tommy hilfiger": "Tommy Hilfiger",
    "calvin klein": "Calvin Klein",
    "zara": "Zara",
    "h&m": "H&M",
    "uniqlo": "Uniqlo",
    "mango": "Mango",
    "shein": "Shein",
    "gucci": "Gucci",
    "prada": "Prada",
    "balenciaga": "Balenciaga",
    "louis vuitton": "Louis Vuitton",
    "supreme": "Supreme",
    "stussy": "Stussy",
    "off-white": "Off-White",
}

# (canonical category, keywords); outer garments first so "sweatshirt" is not read as "shirt"
CATEGORY_GROUPS: List[Tuple[str, Tuple[str, ...]]] = [
    ("hoodie", ("hoodie", "hooded", "sweatshirt")),
    ("jacket", ("jacket", "coat", "blazer", "parka", "windbreaker", "outerwear")),
    ("sweater", ("sweater", "cardigan", "pullover", "knitwear")),
    ("dress", ("dress", "gown")),
    ("t-shirt", ("t-shirt", "tee", "shirt", "jersey", "top")),
    ("skirt", ("skirt",)),
    ("jeans", ("jeans", "denim")),
    ("pants", ("pants", "trousers", "leggings", "joggers")),
    ("shorts", ("shorts",)),
    ("sneakers", ("sneaker", "trainer", "shoe", "footwear")),
    ("boots", ("boot",)),
    ("bag", ("handbag", "backpack", "purse", "bag")),
    ("hat", ("hat", "beanie", "cap")),
]

COLOR_PALETTE: List[str] = [
    "black", "white", "gray", "grey", "red", "blue", "navy", "green", "olive",
    "yellow", "pink", "purple", "brown", "beige", "tan", "orange",
]

# reference points for nearest-color lookup
COLOR_RGB: Dict[str, Tuple[int, int, int]] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "gray": (128, 128, 128),
    "red": (200, 30, 30),
    "blue": (30, 80, 200),
    "navy": (20, 30, 80),
    "green": (40, 140, 60),
    "olive": (110, 110, 40),
    "yellow": (240, 220, 50),
    "pink": (240, 160, 190),
    "purple": (120, 50, 150),
    "brown": (110, 70, 40),
    "beige": (225, 205, 170),
    "orange": (240, 130, 30),
}

PATTERN_KEYWORDS: List[str] = [
    "striped", "stripes", "plaid", "checkered", "floral", "polka dot",
    "camouflage", "leopard", "tie-dye", "graphic", "logo", "solid",
]

MAX_COLORS = 3
DOMINANT_COLOR_COUNT = 5

# 같은 색의 다른 표기 -> COLOR_RGB 기준 이름
COLOR_ALIASES: Dict[str, str] = {"grey": "gray"}

# 짧은 카테고리 키워드는 단어 단위로만 ("committee" 의 tee, "what" 의 hat 등 제외)
_WHOLE_WORD_CATEGORY_KEYWORDS = {"tee", "top", "hat", "cap"}
_CATEGORY_PATTERNS = {
    k: re.compile(rf"\b{re.escape(k)}s?\b")
    for k in _WHOLE_WORD_CATEGORY_KEYWORDS
}


def _has_category_keyword(keyword: str, text: str) -> bool:
    pattern = _CATEGORY_PATTERNS.get(keyword)
    if pattern is not None:
        return pattern.search(text) is not None
    return keyword in text


class VisionAnnotationError(RuntimeError):
    """Vision 감지 호출이 에러 응답을 돌려준 경우"""


@dataclass(frozen=True)
class AttributeRecord:
    """이미지 한 장에서 뽑아낸 쇼핑 속성"""
    brand: Optional[str] = None
    category: Optional[str] = None
    colors: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    texts: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("colors", "patterns", "texts"):
            data[key] = list(data[key])
        return data


@dataclass
class VisionAnnotations:
    """감지 기능별 원시 문자열 + 대표 색상(RGB, score 내림차순)"""
    logos: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)
    web_entities: List[str] = field(default_factory=list)
    objects: List[str] = field(default_factory=list)
    dominant_colors: List[RGB] = field(default_factory=list)

    def pooled_text(self) -> str:
        parts = [*self.logos, *self.labels, *self.texts, *self.web_entities, *self.objects]
        return " ".join(parts).lower()

    def pattern_text(self) -> str:
        return " ".join([*self.labels, *self.web_entities]).lower()


# -------- pure reduction --------

def pick_brand(pooled_text: str) -> Optional[str]:
    text = pooled_text.lower()
    for keyword, canonical in BRAND_KEYWORDS.items():
        if keyword in text:
            return canonical
    return None


def pick_category(pooled_text: str) -> Optional[str]:
    text = pooled_text.lower()
    for canonical, keywords in CATEGORY_GROUPS:
        if any(_has_category_keyword(k, text) for k in keywords):
            return canonical
    return None


def nearest_color_name(rgb: Sequence[float]) -> str:
    return min(COLOR_RGB, key=lambda name: math.dist(COLOR_RGB[name], rgb))


def pick_colors(pooled_text: str, dominant_colors: Iterable[Sequence[float]] = ()) -> List[str]:
    """텍스트 매칭 색상 우선, 이어서 대표 색상의 최근접 이름. 중복 없이 최대 3개."""
    text = pooled_text.lower()
    candidates = [c for c in COLOR_PALETTE if c in text]
    candidates += [nearest_color_name(rgb) for rgb in list(dominant_colors)[:DOMINANT_COLOR_COUNT]]

    out: List[str] = []
    for name in candidates:
        name = COLOR_ALIASES.get(name, name)
        if name in out:
            continue
        out.append(name)
        if len(out) >= MAX_COLORS:
            break
    return out


def pick_patterns(pattern_text: str) -> List[str]:
    text = pattern_text.lower()
    return [p for p in PATTERN_KEYWORDS if p in text]


def reduce_annotations(annotations: VisionAnnotations) -> AttributeRecord:
    pooled = annotations.pooled_text()
    # 알려진 브랜드가 없으면 Vision 이 찾은 첫 로고를 그대로 브랜드로 사용
    brand = pick_brand(pooled) or (annotations.logos[0] if annotations.logos else None)
    return AttributeRecord(
        brand=brand,
        category=pick_category(pooled),
        colors=tuple(pick_colors(pooled, annotations.dominant_colors)),
        patterns=tuple(pick_patterns(annotations.pattern_text())),
        texts=tuple(annotations.texts),
    )


# -------- response parsing --------

def _strings(items: Optional[Iterable[Any]], attr: str) -> List[str]:
    out: List[str] = []
    for item in items or []:
        value = (getattr(item, attr, None) or "").strip()
        if value:
            out.append(value)
    return out


def _dominant_colors(response: Any) -> List[RGB]:
    props = getattr(response, "image_properties_annotation", None)
    dominant = getattr(props, "dominant_colors", None)
    colors = list(getattr(dominant, "colors", None) or [])
    colors.sort(key=lambda c: getattr(c, "score", 0.0) or 0.0, reverse=True)
    out: List[RGB] = []
    for info in colors[:DOMINANT_COLOR_COUNT]:
        color = getattr(info, "color", None)
        if color is None:
            continue
        out.append((float(color.red or 0), float(color.green or 0), float(color.blue or 0)))
    return out


class AttributeExtractor:
    """Vision 클라이언트를 감싸 이미지 -> AttributeRecord 변환"""

    def __init__(self, client: Any, capabilities: Optional[VisionCapabilities] = None, project_id: Optional[str] = None):
        self.client = client
        self.capabilities = capabilities or VisionCapabilities.detect(client)
        self.project_id = project_id

    async def annotate(self, image_bytes: bytes) -> VisionAnnotations:
        features = list(FEATURE_METHODS)
        # 하나라도 실패하면 gather가 그대로 예외를 올린다
        responses = await asyncio.gather(*(self._detect(f, image_bytes) for f in features))
        res = dict(zip(features, responses))

        web = getattr(res["web_entities"], "web_detection", None)
        return VisionAnnotations(
            logos=_strings(getattr(res["logos"], "logo_annotations", None), "description"),
            labels=_strings(getattr(res["labels"], "label_annotations", None), "description"),
            texts=_strings(getattr(res["texts"], "text_annotations", None), "description"),
            web_entities=_strings(getattr(web, "web_entities", None), "description"),
            objects=_strings(getattr(res["objects"], "localized_object_annotations", None), "name"),
            dominant_colors=_dominant_colors(res["image_properties"]),
        )

    async def extract(self, image_bytes: bytes) -> AttributeRecord:
        annotations = await self.annotate(image_bytes)
        record = reduce_annotations(annotations)
        logger.debug(f"Vision attributes: {record}")
        return record

    async def _detect(self, feature: str, image_bytes: bytes) -> Any:
        if not self.capabilities.supports(feature):
            return None
        method = getattr(self.client, FEATURE_METHODS[feature])
        # 동기 gRPC 호출은 스레드로 넘겨 병렬 실행
        response = await asyncio.to_thread(method, {"content": image_bytes})
        message = getattr(getattr(response, "error", None), "message", "")
        if message:
            raise VisionAnnotationError(f"{feature} detection failed: {message}")
        return response
