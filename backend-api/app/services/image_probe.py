"""
업로드 이미지 메타데이터 (디버그 응답용)
"""
import io
import logging
from typing import Any, Dict, Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def describe_image(image_bytes: bytes) -> Optional[Dict[str, Any]]:
    """포맷/크기 반환. 이미지로 읽을 수 없으면 None"""
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            return {"format": img.format, "width": img.width, "height": img.height}
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"업로드 이미지 메타데이터 읽기 실패: {e}")
        return None
