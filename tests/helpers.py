"""Fake upstream models served through httpx.MockTransport."""

import io

import httpx
from PIL import Image

from src.clients.upstream import UpstreamModelClient
from src.schemas.detection import ModelTarget


TEMPLATE = 'https://detect.example.test/{id}'

BOTTLE = {
    'class': 'bottle',
    'confidence': 0.92,
    'x': 100,
    'y': 150,
    'width': 40,
    'height': 60,
}


def make_target(model_id: str, credential: str = 'secret') -> ModelTarget:
    return ModelTarget(id=model_id, credential=credential, endpoint_template=TEMPLATE)


def model_id_of(request: httpx.Request) -> str:
    return request.url.path.lstrip('/')


def detections_body(*predictions, width=640, height=480) -> dict:
    return {
        'predictions': list(predictions),
        'image': {'width': width, 'height': height},
        'time': 0.05,
    }


def make_client(handler) -> UpstreamModelClient:
    transport = httpx.MockTransport(handler)
    return UpstreamModelClient(http_client=httpx.AsyncClient(transport=transport))


def jpeg_bytes(size=(64, 48), color=(200, 30, 30), fmt='JPEG') -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format=fmt)
    return buffer.getvalue()
