import json

import pytest

from src.config import Settings, get_settings
from src.config.settings import DEFAULT_ENDPOINT_TEMPLATE
from src.core.exceptions import ConfigurationError


def test_targets_from_environment(monkeypatch):
    monkeypatch.setenv('ROBOFLOW_API_KEY', 'shared-key')
    monkeypatch.setenv(
        'MODEL_TARGETS',
        json.dumps(
            [
                {'id': 'waste-detection/1'},
                {
                    'id': 'bottles/3',
                    'credential': 'own-key',
                    'endpoint_template': 'https://detect.roboflow.com/{id}',
                },
            ]
        ),
    )

    targets = get_settings().resolve_targets()

    assert [t.id for t in targets] == ['waste-detection/1', 'bottles/3']
    assert targets[0].credential == 'shared-key'
    assert targets[0].url == DEFAULT_ENDPOINT_TEMPLATE.format(id='waste-detection/1')
    assert targets[1].credential == 'own-key'
    assert targets[1].url == 'https://detect.roboflow.com/bottles/3'


def test_no_targets_by_default():
    assert Settings().resolve_targets() == []


def test_upstream_timeout_unset_by_default():
    assert Settings().upstream_timeout is None


@pytest.mark.parametrize(
    'entries, match',
    [
        ([{'id': 'a'}, {'id': 'a'}], 'Duplicate'),
        ([{'id': ''}], 'empty id'),
        ([{'id': 'a', 'credential': 'k', 'endpoint_template': 'https://x/fixed'}], 'placeholder'),
    ],
)
def test_invalid_targets(entries, match):
    settings = Settings(MODEL_TARGETS=entries, roboflow_api_key='k')

    with pytest.raises(ConfigurationError, match=match):
        settings.resolve_targets()


def test_missing_credential():
    with pytest.raises(ConfigurationError, match='No credential'):
        Settings(MODEL_TARGETS=[{'id': 'a'}]).resolve_targets()


def test_targets_are_immutable():
    target = Settings(MODEL_TARGETS=[{'id': 'a', 'credential': 'k'}]).resolve_targets()[0]

    with pytest.raises(ValueError):
        target.id = 'b'
