import pytest
from pydantic import ValidationError

from rasterh3 import ConverterConfig


def test_defaults(monkeypatch):
    for name in ("RASTERH3_MIN_CHUNK_SIZE", "RASTERH3_MAX_CHUNK_SIZE", "RASTERH3_CHUNK_DIVISOR", "RASTERH3_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    cfg = ConverterConfig.from_env()
    assert cfg == ConverterConfig()
    assert (cfg.min_chunk_size, cfg.max_chunk_size, cfg.chunk_divisor, cfg.max_workers) == (10, 100, 10, 0)


@pytest.mark.parametrize("x_size, expected", [(0, 10), (50, 10), (200, 20), (999, 99), (5000, 100)])
def test_chunk_size(x_size, expected):
    assert ConverterConfig().chunk_size(x_size) == expected


def test_from_env(monkeypatch):
    monkeypatch.setenv("RASTERH3_MIN_CHUNK_SIZE", "4")
    monkeypatch.setenv("RASTERH3_MAX_CHUNK_SIZE", "8")
    monkeypatch.setenv("RASTERH3_MAX_WORKERS", "2")
    cfg = ConverterConfig.from_env()
    assert cfg.chunk_size(1000) == 8
    assert cfg.chunk_size(10) == 4
    assert cfg.max_workers == 2


def test_invalid_bounds():
    with pytest.raises(ValidationError):
        ConverterConfig(min_chunk_size=20, max_chunk_size=10)
    with pytest.raises(ValidationError):
        ConverterConfig(min_chunk_size=0)
    with pytest.raises(ValidationError):
        ConverterConfig(max_workers=-1)
