import logging

import pytest
from pydantic import ValidationError

from canopy_core.logutil import RedactingFilter, timed
from canopy_core.settings import Settings


def test_defaults(monkeypatch):
    for var in ("CANOPY_HASH_ALG", "CANOPY_FILES_DIR", "CANOPY_LOG_TIMINGS"):
        monkeypatch.delenv(var, raising=False)
    s = Settings()
    assert s.hash_alg == "sha256"
    assert s.files_dir == "./files"
    assert s.log_timings is True


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CANOPY_HASH_ALG", "SHA3-256")
    monkeypatch.setenv("CANOPY_FILES_DIR", "/data/items")
    monkeypatch.setenv("CANOPY_LOG_TIMINGS", "false")
    s = Settings()
    assert s.hash_alg == "sha3_256"
    assert s.files_dir == "/data/items"
    assert s.log_timings is False


@pytest.mark.parametrize("alg", ["shake_256", "md99"])
def test_rejects_unusable_algorithm(monkeypatch, alg):
    monkeypatch.setenv("CANOPY_HASH_ALG", alg)
    with pytest.raises(ValidationError):
        Settings()


def test_redacting_filter():
    rec = logging.LogRecord("canopy", logging.INFO, __file__, 1, "loaded sk_b64=%s", ("QUJD",), None)
    assert RedactingFilter().filter(rec)
    assert rec.getMessage() == "loaded sk_b64=***"


def test_timed_logs_elapsed(caplog):
    log = logging.getLogger("canopy.test")
    with caplog.at_level(logging.INFO, logger="canopy.test"):
        with timed("Setup", logger=log):
            pass
        with timed("Quiet", logger=log, enabled=False):
            pass
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 1
    assert messages[0].startswith("Setup took ") and messages[0].endswith("ms")


def test_timed_default_logger(caplog):
    with caplog.at_level(logging.INFO, logger="canopy.timing"):
        with timed("Insert"):
            pass
    assert [r.name for r in caplog.records] == ["canopy.timing"]
