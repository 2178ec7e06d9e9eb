import base64

import pytest

from src.config import get_settings
from src.schemas.detection import ImagePayload, ModelTarget
from tests.helpers import jpeg_bytes, make_target


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ('MODEL_TARGETS', 'ROBOFLOW_API_KEY', 'ENDPOINT_TEMPLATE', 'UPSTREAM_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def image() -> ImagePayload:
    return ImagePayload(data=base64.b64encode(jpeg_bytes()).decode('ascii'))


@pytest.fixture
def targets() -> list[ModelTarget]:
    return [make_target('m1'), make_target('m2')]
