import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolated_engine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RPG_RULESET", "RPG_RESOLUTION_POLICY", "RPG_DATABASE_URL", "RPG_COMBAT_SEED"):
        monkeypatch.delenv(name, raising=False)
