"""
Pydantic 스키마 패키지
"""

from .scan import MatchItem, ScanResponse

__all__ = [
    "MatchItem",
    "ScanResponse",
]
