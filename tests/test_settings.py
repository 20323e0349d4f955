import logging

import pytest
from pydantic import ValidationError

from hashtree_core.logutil import DigestAbbreviatingFilter, setup_logging
from hashtree_core.settings import Settings, parse_separator


def test_defaults():
    s = Settings()
    config = s.tree_config()
    assert config.hash.name == "sha256"
    assert config.use_hex is False
    assert config.separator == 0


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("HASHTREE_HASH", "blake2b-256")
    monkeypatch.setenv("HASHTREE_USE_HEX", "true")
    monkeypatch.setenv("HASHTREE_SEPARATOR", ":")
    monkeypatch.setenv("HASHTREE_LOG_LEVEL", "DEBUG")
    s = Settings()
    config = s.tree_config()
    assert config.hash.name == "blake2b-256"
    assert config.use_hex is True
    assert config.separator == 0x3A
    assert s.log_level == "DEBUG"


def test_keyed_hash_from_env(monkeypatch):
    monkeypatch.setenv("HASHTREE_HASH", "blake2b-256")
    monkeypatch.setenv("HASHTREE_HASH_KEY_HEX", "00" * 16)
    config = Settings().tree_config()
    assert config.hash.digest(b"a") != Settings(HASHTREE_HASH_KEY_HEX=None).tree_config().hash.digest(b"a")


def test_bad_separator_env(monkeypatch):
    monkeypatch.setenv("HASHTREE_SEPARATOR", "0x100")
    with pytest.raises(ValidationError):
        Settings()


@pytest.mark.parametrize(
    "value,expected",
    [(":", 0x3A), ("0x31", 0x31), ("0X00", 0), ("49", 49), ("7", 7), (255, 255)],
)
def test_parse_separator(value, expected):
    assert parse_separator(value) == expected


@pytest.mark.parametrize("value", ["", "::", "0xzz", "256", -1])
def test_parse_separator_rejects(value):
    with pytest.raises(ValueError):
        parse_separator(value)


def _record(level, msg, *args):
    return logging.LogRecord("hashtree_core.proof", level, __file__, 1, msg, args, None)


def test_filter_abbreviates_digests():
    digest = "ab" * 32
    rec = _record(logging.WARNING, "proof root %s does not match", digest)
    assert DigestAbbreviatingFilter().filter(rec) is True
    assert rec.getMessage() == f"proof root {digest[:12]}… does not match"


def test_filter_keeps_debug_and_short_values():
    digest = "cd" * 32
    rec = _record(logging.DEBUG, "built tree root %s", digest)
    DigestAbbreviatingFilter().filter(rec)
    assert digest in rec.getMessage()

    rec = _record(logging.INFO, "leaf %s", "deadbeef")
    DigestAbbreviatingFilter().filter(rec)
    assert rec.getMessage() == "leaf deadbeef"


def test_setup_logging_accepts_names():
    setup_logging("WARNING", loggers=("hashtree_core.test",))
    lg = logging.getLogger("hashtree_core.test")
    assert lg.level == logging.WARNING


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        setup_logging("bogus")


def test_module_records_are_abbreviated(caplog):
    from hashtree_core.proof import find_proof_for, verify_proof
    from hashtree_core.tree import build

    setup_logging("INFO")
    a = build(list("ABCD"), hash_name="sha256")
    b = build(list("WXYZ"), hash_name="sha256")
    with caplog.at_level(logging.WARNING, logger="hashtree_core.proof"):
        assert verify_proof(b, find_proof_for(a, "A")) is False
    [rec] = [r for r in caplog.records if r.name == "hashtree_core.proof"]
    msg = rec.getMessage()
    assert a.digest.hex() not in msg
    assert b.digest.hex() not in msg
    assert f"{a.digest.hex()[:12]}…" in msg
    assert f"{b.digest.hex()[:12]}…" in msg
