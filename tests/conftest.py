import sys
from pathlib import Path

import pytest

# Add repo root so "import src...." works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.api.favorites import FavoritesStore  # noqa: E402
from src.api.preferences import GlobalPreferencesStore  # noqa: E402


@pytest.fixture
def prefs() -> GlobalPreferencesStore:
    return GlobalPreferencesStore(default_language="en", default_currency="USD")


@pytest.fixture
def favorites() -> FavoritesStore:
    return FavoritesStore()
