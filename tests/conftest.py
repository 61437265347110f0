import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

from keylist.core import HashKeylist  # noqa: E402
from tests.util.builders import make_keylist  # noqa: E402


@pytest.fixture
def sample() -> HashKeylist:
    """keys [oke, test, oke] with rows oke=[1, 2], test=[19]."""

    return make_keylist(["oke", "test", "oke"], {"oke": [1, 2], "test": [19]})


@pytest.fixture
def document(tmp_path: Path) -> Path:
    path = tmp_path / "pairs.json"
    path.write_text('[["oke", 1], ["test", 19], ["oke", 2]]\n', encoding="utf-8")
    return path
