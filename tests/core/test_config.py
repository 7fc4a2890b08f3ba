# tests/core/test_config.py

import dataclasses

import pytest

from uhf_gen2.core.config import DEFAULT_CONFIG, ReaderConfig


def test_defaults():
    assert DEFAULT_CONFIG.settle_delay == 0.2
    assert DEFAULT_CONFIG.response_timeout == 0.5
    assert DEFAULT_CONFIG.read_size == 256
    assert DEFAULT_CONFIG.max_poll_wait == 3.0


def test_override():
    config = ReaderConfig(settle_delay=0.05, read_size=64)
    assert config.settle_delay == 0.05
    assert config.read_size == 64
    assert config.response_timeout == DEFAULT_CONFIG.response_timeout


@pytest.mark.parametrize("field_name", ["settle_delay", "response_timeout", "max_poll_wait", "retry_sleep"])
def test_negative_values_rejected(field_name):
    with pytest.raises(ValueError, match=field_name):
        ReaderConfig(**{field_name: -0.1})


def test_read_size_must_be_positive():
    with pytest.raises(ValueError, match="read_size"):
        ReaderConfig(read_size=0)


def test_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.settle_delay = 1.0
