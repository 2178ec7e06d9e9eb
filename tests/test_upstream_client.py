import asyncio

import httpx

from src.clients.upstream import FORM_CONTENT_TYPE
from src.schemas.detection import FailureOutcome, ImagePayload, SuccessOutcome
from tests.helpers import BOTTLE, detections_body, make_client, make_target


def submit(handler, target, image):
    async def run():
        client = make_client(handler)
        async with client:
            return await client.submit(target, image)

    return asyncio.run(run())


def test_request_shape(image):
    seen = {}

    def handler(request: httpx.Request):
        seen['method'] = request.method
        seen['url'] = request.url
        seen['content_type'] = request.headers['content-type']
        seen['body'] = request.content.decode()
        return httpx.Response(200, json=detections_body())

    submit(handler, make_target('waste-detection/1', credential='k3y'), image)

    assert seen['method'] == 'POST'
    assert seen['url'].host == 'detect.example.test'
    assert seen['url'].path == '/waste-detection/1'
    assert seen['url'].params['api_key'] == 'k3y'
    assert seen['content_type'] == FORM_CONTENT_TYPE
    assert seen['body'] == image.data


def test_success_passes_detections_through_verbatim(image):
    odd = {'class': 'can', 'confidence': 0.333333, 'x': -5.5, 'y': 1e4, 'width': 0.1, 'height': 7}

    def handler(request):
        return httpx.Response(200, json=detections_body(BOTTLE, odd, width=1280, height=720))

    outcome = submit(handler, make_target('m1'), image)

    assert isinstance(outcome, SuccessOutcome)
    assert [d.model_dump(by_alias=True) for d in outcome.detections] == [BOTTLE, odd]
    assert (outcome.image.width, outcome.image.height) == (1280, 720)


def test_error_status_becomes_failure(image):
    outcome = submit(lambda request: httpx.Response(500, text='boom'), make_target('m2'), image)

    assert isinstance(outcome, FailureOutcome)
    assert 'status 500' in outcome.message
    assert 'm2' in outcome.message


def test_invalid_json_becomes_failure(image):
    outcome = submit(lambda request: httpx.Response(200, text='<html>'), make_target('m1'), image)

    assert isinstance(outcome, FailureOutcome)
    assert 'invalid JSON' in outcome.message


def test_schema_mismatch_becomes_failure(image):
    outcome = submit(
        lambda request: httpx.Response(200, json={'predictions': [{'class': 'x'}]}),
        make_target('m1'),
        image,
    )

    assert isinstance(outcome, FailureOutcome)
    assert 'schema mismatch' in outcome.message


def test_timeout_becomes_failure(image):
    def handler(request):
        raise httpx.ReadTimeout('timed out', request=request)

    outcome = submit(handler, make_target('m1'), image)

    assert isinstance(outcome, FailureOutcome)
    assert 'timed out' in outcome.message


def test_connection_error_becomes_failure(image):
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    outcome = submit(handler, make_target('m1'), image)

    assert isinstance(outcome, FailureOutcome)
    assert 'ConnectError' in outcome.message


def test_empty_inputs_fail_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=detections_body())

    empty_image = submit(handler, make_target('m1'), ImagePayload(data=''))
    empty_credential = submit(
        handler, make_target('m1', credential=''), ImagePayload(data='aGVsbG8=')
    )

    assert isinstance(empty_image, FailureOutcome)
    assert isinstance(empty_credential, FailureOutcome)
    assert calls == []


def test_credential_hidden_from_repr():
    assert 'secret' not in repr(make_target('m1', credential='secret'))
