"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local goxref package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of goxref modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("goxref"):
        del sys.modules[module_name]

TESTDATA = Path(__file__).parent / "testdata"


@pytest.fixture
def testdata() -> Path:
    """GOPATH-style root holding the fixture packages under src/."""
    return TESTDATA


@pytest.fixture(autouse=True)
def _isolate_go_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's GOPATH and GOROOT out of import resolution."""
    monkeypatch.delenv("GOPATH", raising=False)
    monkeypatch.delenv("GOROOT", raising=False)
