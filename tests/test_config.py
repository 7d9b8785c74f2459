"""Tests for settings loading."""

import logging

from cifstruct.config import Settings, load_settings
from cifstruct.core.logging_utils import get_logger


def test_defaults(monkeypatch):
    for var in ("CIFSTRUCT_AUX_WORKERS", "CIFSTRUCT_LOG_LEVEL", "CIFSTRUCT_DATASET_PATTERN", "CIFSTRUCT_PROGRESS"):
        monkeypatch.delenv(var, raising=False)
    s = load_settings()
    assert s == Settings()
    assert s.aux_workers == 1
    assert s.progress is True


def test_from_environment(monkeypatch):
    monkeypatch.setenv("CIFSTRUCT_AUX_WORKERS", "4")
    monkeypatch.setenv("CIFSTRUCT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CIFSTRUCT_DATASET_PATTERN", "*.cif.gz")
    monkeypatch.setenv("CIFSTRUCT_PROGRESS", "no")
    s = load_settings()
    assert s.aux_workers == 4
    assert s.log_level == "DEBUG"
    assert s.dataset_pattern == "*.cif.gz"
    assert s.progress is False


def test_workers_at_least_one(monkeypatch):
    monkeypatch.setenv("CIFSTRUCT_AUX_WORKERS", "0")
    assert load_settings().aux_workers == 1


def test_get_logger():
    logger = get_logger("cifstruct.test")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "cifstruct.test"
