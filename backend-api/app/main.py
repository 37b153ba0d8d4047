"""
Outfit Scanner - FastAPI 메인 애플리케이션
스크린샷 한 장으로 비슷한 옷을 찾아 구매 링크를 돌려준다
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from app.core.config import settings
from app.core.vision_client import VisionCapabilities, build_vision_client
from app.services.vision_service import AttributeExtractor

from app.api.scan import router as scan_router

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 이벤트"""
    logger.info("🚀 Outfit Scanner 시작")

    # Vision 클라이언트는 프로세스당 한 번 생성해 주입
    app.state.attribute_extractor = None
    try:
        client, project_id = build_vision_client(settings)
        capabilities = VisionCapabilities.detect(client)
        app.state.attribute_extractor = AttributeExtractor(client, capabilities, project_id)
        logger.info(f"🔍 Vision 기능: {', '.join(capabilities.enabled())}")
    except Exception as e:
        # 기동은 계속, 요청 시 500으로 응답
        logger.error(f"Vision 클라이언트 생성 실패: {e}")

    if not settings.SHOPPING_SEARCH_ENABLED:
        logger.warning("🧪 쇼핑 검색 비활성화 (dry-run): 항상 빈 결과를 반환합니다")

    yield

    logger.info("👋 Outfit Scanner 종료")


# FastAPI 앱 생성
app = FastAPI(
    title="Outfit Scanner API",
    description="Find that TikTok outfit instantly: screenshot -> Vision -> Google Shopping",
    version=VERSION,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scan_router, prefix="/api", tags=["🔍 스캔"])


def _search_status() -> str:
    if not settings.SHOPPING_SEARCH_ENABLED:
        return "dry-run"
    return "enabled" if settings.SERPAPI_KEY else "missing-key"


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "Outfit Scanner API",
        "version": VERSION,
        "how_it_works": [
            "Upload a screenshot or paste a TikTok link.",
            "Computer vision scans the image for fashion pieces.",
            "Shopping links with similar items from popular stores are returned.",
        ],
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "vision": getattr(app.state, "attribute_extractor", None) is not None,
        "search": _search_status(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True if settings.ENVIRONMENT == "development" else False
    )
