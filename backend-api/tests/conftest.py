"""공용 픽스처."""

import io
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.core.config import Settings, get_settings
from app.dependencies import get_attribute_extractor
from app.main import app
from app.services.vision_service import AttributeRecord


class FakeExtractor:
    """AttributeExtractor 대역: 고정 레코드를 돌려준다."""

    def __init__(self, record=None, error=None, project_id="outfit-test"):
        self.record = record or AttributeRecord()
        self.error = error
        self.project_id = project_id
        self.calls = []

    async def extract(self, image_bytes):
        self.calls.append(image_bytes)
        if self.error:
            raise self.error
        return self.record


def make_settings(**overrides) -> Settings:
    values = {
        "SERPAPI_KEY": "test-key",
        "GOOGLE_CLOUD_CREDENTIALS": None,
        "GCP_KEY_B64": None,
        "SHOPPING_SEARCH_ENABLED": True,
    }
    values.update(overrides)
    return Settings(**values)


def annotation(**fields):
    """Vision 응답 대역. error.message 는 기본 빈 문자열."""
    fields.setdefault("error", SimpleNamespace(message=""))
    return SimpleNamespace(**fields)


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 3), (0, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def api():
    """dependency override 를 지정할 수 있는 TestClient 를 돌려준다."""

    def _make(extractor=None, settings=None):
        app.dependency_overrides[get_attribute_extractor] = lambda: extractor
        app.dependency_overrides[get_settings] = lambda: settings or make_settings()
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
