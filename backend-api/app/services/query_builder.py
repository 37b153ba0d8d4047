"""
AttributeRecord -> 쇼핑 검색어
- 브랜드/카테고리 둘 다 없으면 빈 문자열 (의미 있는 검색어 없음)
"""
from __future__ import annotations

import dataclasses
import re

from app.services.vision_service import AttributeRecord

# 쇼핑 의도를 붙이는 꼬리 토큰
INTENT_TOKEN = "buy"

_TSHIRT_TEXT = re.compile(r"\b(t-?shirts?|tees?)\b", re.IGNORECASE)


def infer_attributes(record: AttributeRecord) -> AttributeRecord:
    """카테고리가 비어 있으면 원문 텍스트에서 t-shirt 추론. 입력은 바꾸지 않는다."""
    if record.category:
        return record
    if any(_TSHIRT_TEXT.search(t) for t in record.texts):
        return dataclasses.replace(record, category="t-shirt")
    return record


def build_query(record: AttributeRecord) -> str:
    a = infer_attributes(record)
    if not (a.brand or a.category):
        return ""

    parts = []
    if a.brand:
        parts.append(a.brand)
    if a.category:
        parts.append(a.category)
    if a.colors:
        parts.append(a.colors[0])
    if a.patterns:
        parts.append(a.patterns[0])
    parts.append(INTENT_TOKEN)
    return " ".join(parts).strip()
