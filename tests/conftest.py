import os
import sys
from pathlib import Path

import pytest

# Ensure 'src' and the repo root are on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for _p in (SRC, ROOT):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

# Keep a developer's .env / shell config from leaking into default settings
for _var in ("HASHTREE_HASH", "HASHTREE_HASH_KEY_HEX", "HASHTREE_USE_HEX", "HASHTREE_SEPARATOR"):
    os.environ.pop(_var, None)


@pytest.fixture
def letters():
    from tests.vectors import Str

    return [Str(c) for c in "ABCDEFG"]


@pytest.fixture
def blake_config():
    from hashtree_core.tree import TreeConfig

    return TreeConfig.named("blake2b-256", use_hex=False, separator=0x31)


@pytest.fixture
def sha_hex_config():
    from hashtree_core.tree import TreeConfig

    return TreeConfig.named("sha256", use_hex=True, separator=ord(":"))
