import hashlib
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from canopy_core.content import TextContent  # noqa: E402
from canopy_core.crypto import ed25519_generate  # noqa: E402


def h(b: bytes) -> bytes:
    return hashlib.sha256(b).digest()


def texts(*values):
    return [TextContent(v) for v in values]


@pytest.fixture
def keypair():
    return ed25519_generate()


@pytest.fixture
def key_files(tmp_path, keypair):
    sk, pk = keypair
    keys = tmp_path / "keys"
    keys.mkdir()
    (keys / "ed25519_private.key").write_bytes(sk)
    (keys / "ed25519_public.key").write_bytes(pk)
    return keys / "ed25519_private.key", keys / "ed25519_public.key"
