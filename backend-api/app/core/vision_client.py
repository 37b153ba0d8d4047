"""
Google Cloud Vision 클라이언트 부트스트랩
- 인증 정보는 raw JSON > base64 JSON > 키 파일 경로 순으로 시도
- 클라이언트가 지원하는 감지 기능은 기동 시 한 번만 판별한다
"""
from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple

from google.cloud import vision

from app.core.config import Settings
from app.core.paths import resolve_project_path

logger = logging.getLogger(__name__)

# 기능 이름 -> ImageAnnotatorClient 헬퍼 메서드
FEATURE_METHODS: Dict[str, str] = {
    "logos": "logo_detection",
    "labels": "label_detection",
    "texts": "text_detection",
    "web_entities": "web_detection",
    "objects": "object_localization",
    "image_properties": "image_properties",
}


@dataclass(frozen=True)
class VisionCapabilities:
    """클라이언트가 제공하는 감지 기능 플래그"""
    logos: bool = True
    labels: bool = True
    texts: bool = True
    web_entities: bool = True
    objects: bool = True
    image_properties: bool = True

    @classmethod
    def detect(cls, client: Any) -> "VisionCapabilities":
        flags = {
            name: callable(getattr(client, method, None))
            for name, method in FEATURE_METHODS.items()
        }
        missing = [name for name, ok in flags.items() if not ok]
        if missing:
            logger.warning(f"Vision 클라이언트 미지원 기능(빈 결과로 처리): {', '.join(missing)}")
        return cls(**flags)

    def supports(self, feature: str) -> bool:
        return bool(getattr(self, feature, False))

    def enabled(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]


def resolve_credentials(settings: Settings) -> Tuple[Dict[str, Any], str]:
    """서비스 계정 정보를 찾는다. 반환: (info, 출처)

    파싱 실패한 방법은 경고만 남기고 다음 방법으로 넘어간다.
    마지막 키 파일까지 실패하면 예외를 그대로 올린다.
    """
    raw = settings.GOOGLE_CLOUD_CREDENTIALS
    if raw:
        try:
            return json.loads(raw), "GOOGLE_CLOUD_CREDENTIALS"
        except ValueError as e:
            logger.warning(f"Invalid GOOGLE_CLOUD_CREDENTIALS JSON: {e}")

    b64 = settings.GCP_KEY_B64
    if b64:
        try:
            decoded = base64.b64decode(b64).decode("utf-8")
            return json.loads(decoded), "GCP_KEY_B64"
        except ValueError as e:
            # binascii.Error / UnicodeDecodeError 모두 ValueError 계열
            logger.warning(f"Invalid GCP_KEY_B64 base64/JSON: {e}")

    key_path = resolve_project_path(settings.GOOGLE_APPLICATION_CREDENTIALS)
    with open(key_path, "r", encoding="utf-8") as f:
        return json.load(f), key_path


def build_vision_client(settings: Settings) -> Tuple[vision.ImageAnnotatorClient, Optional[str]]:
    """ImageAnnotatorClient 생성. 반환: (client, project_id)"""
    info, source = resolve_credentials(settings)
    client = vision.ImageAnnotatorClient.from_service_account_info(info)
    project_id = info.get("project_id")
    logger.info(f"Vision 클라이언트 준비 완료 (credentials: {source}, project: {project_id})")
    return client, project_id
