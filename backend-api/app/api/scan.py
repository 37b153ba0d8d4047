"""
아웃핏 스캔 API
스크린샷 업로드 -> Vision 속성 추출 -> 검색어 생성 -> 쇼핑 검색
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.dependencies import get_attribute_extractor
from app.schemas.scan import MatchItem, ScanResponse
from app.services.image_probe import describe_image
from app.services.query_builder import build_query, infer_attributes
from app.services.shopping_service import search_shopping
from app.services.vision_service import AttributeExtractor

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_INPUT_ERROR = "Provide a file or a TikTok URL"
# 링크 수집은 아직 미구현: 스크린샷 업로드 유도
LINK_ONLY_NOTE = "Upload a screenshot of the outfit moment for best results."


def _respond(body: ScanResponse, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post("/process-image", response_model=ScanResponse, response_model_exclude_none=True)
async def process_image(
    file: Optional[UploadFile] = File(None),
    tiktok_url: Optional[str] = Form(None, alias="tiktokUrl"),
    debug: Optional[str] = Query(None, description="1 이면 진단 정보 포함"),
    extractor: Optional[AttributeExtractor] = Depends(get_attribute_extractor),
    settings: Settings = Depends(get_settings),
):
    """
    스크린샷(file) 또는 영상 링크(tiktokUrl)를 받아 구매 가능한 상품 목록을 반환합니다.
    """
    is_debug = debug == "1"
    try:
        link = (tiktok_url or "").strip()
        if file is None and not link:
            return _respond(ScanResponse(error=MISSING_INPUT_ERROR), status.HTTP_400_BAD_REQUEST)

        if file is None:
            return _respond(ScanResponse(matches=[], note=LINK_ONLY_NOTE))

        try:
            image_bytes = await file.read()
        finally:
            await file.close()

        # 1) Vision 속성 추출
        if extractor is None:
            raise RuntimeError("Vision client is not configured")
        attributes = await extractor.extract(image_bytes)

        # 2) 검색어 생성
        query = build_query(attributes)
        dry_run = not settings.SHOPPING_SEARCH_ENABLED

        info: Optional[Dict[str, Any]] = None
        if is_debug:
            info = {
                "projectId": extractor.project_id,
                "query": query,
                "attributes": infer_attributes(attributes).to_dict(),
                "dryRun": dry_run,
                "image": describe_image(image_bytes),
            }
            logger.info(f"[process-image DEBUG] {info}")

        if not query or dry_run:
            return _respond(ScanResponse(matches=[], debug=_with_count(info, [])))

        # 3) 쇼핑 검색
        matches = await search_shopping(query, settings)
        return _respond(ScanResponse(matches=matches, debug=_with_count(info, matches)))
    except Exception as e:
        logger.exception(f"process-image error: {e}")
        return _respond(
            ScanResponse(error=str(e) or "Processing failed"),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def _with_count(info: Optional[Dict[str, Any]], matches: List[MatchItem]) -> Optional[Dict[str, Any]]:
    if info is None:
        return None
    return {**info, "count": len(matches)}
