from typing import Optional

from fastapi import Request

from app.core.config import get_settings
from app.services.vision_service import AttributeExtractor

# 이 파일은 의존성 함수들을 모아두는 곳으로 사용될 수 있습니다.
# Vision 추출기는 앱 기동(lifespan) 시 한 번 만들어 app.state 에 보관합니다.


def get_attribute_extractor(request: Request) -> Optional[AttributeExtractor]:
    return getattr(request.app.state, "attribute_extractor", None)


__all__ = ["get_settings", "get_attribute_extractor"]
