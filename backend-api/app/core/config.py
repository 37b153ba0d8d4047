"""
애플리케이션 설정
"""

from pydantic_settings import BaseSettings
from typing import Optional, List
from pathlib import Path
from dotenv import load_dotenv


"""env 로딩 우선순위
1) OS 환경변수 (배포 대시보드 Environment 등)
2) 프로젝트 루트의 .env (repo/.env)
3) backend-api 디렉터리의 .env (repo/backend-api/.env)
"""

# .env 사전 로드 (OS 환경변수 우선, override=False)
_here = Path(__file__).resolve()
_repo_root_env = _here.parents[3] / ".env"  # repo/.env
_backend_env = _here.parents[2] / ".env"    # backend-api/.env
for _p in (_repo_root_env, _backend_env):
    if _p.exists():
        load_dotenv(dotenv_path=str(_p), override=False)


class Settings(BaseSettings):
    """애플리케이션 설정"""
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Google Cloud Vision 인증 (우선순위: raw JSON > base64 JSON > 키 파일 경로)
    GOOGLE_CLOUD_CREDENTIALS: Optional[str] = None
    GCP_KEY_B64: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: str = "vision-key.json"

    # SerpAPI (Google Shopping)
    SERPAPI_KEY: str | None = None
    SERPAPI_URL: str = "https://serpapi.com/search.json"
    SEARCH_LANGUAGE: str = "en"
    SEARCH_COUNTRY: str = "us"
    SEARCH_TIMEOUT_SECONDS: int = 20
    MAX_MATCHES: int = 12

    # 기능 플래그: False면 검색 호출 없이 빈 결과 반환 (dry-run)
    SHOPPING_SEARCH_ENABLED: bool = True

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'

settings = Settings()


def get_settings() -> Settings:
    """라우터 의존성용 설정 반환 (테스트에서 override)"""
    return settings


# 환경별 설정 검증
def validate_settings(s: Settings = settings):
    """설정 검증"""
    if s.ENVIRONMENT == "production":
        if s.SHOPPING_SEARCH_ENABLED and not s.SERPAPI_KEY:
            raise ValueError("프로덕션 환경에서 쇼핑 검색을 켜려면 SERPAPI_KEY가 필요합니다.")

    return True


# 설정 검증 실행
validate_settings()
