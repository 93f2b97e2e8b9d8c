"""
Shared test fixtures and path constants for nbm-ingest tests.

Sample NBM 1D viewer exports live in ``tests/test_data/``. Every
``*.csv`` file there is picked up by ``load_test_files()``; drop a new
export in the directory to have it covered by the integration tests.
"""

from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Input file paths -- edit here if files move or new ones are added
# ---------------------------------------------------------------------------
TEST_DATA_DIR = Path(__file__).resolve().parent / "test_data"

KMSO_CSV = TEST_DATA_DIR / "kmso_nbm_2023010100.csv"
KGEG_CSV = TEST_DATA_DIR / "kgeg_nbm_2023020512.csv"

# The small example used throughout the unit tests
SIMPLE_TEXT = (
    "time,TMAX,TMIN\n"
    "2023010100,10.5,\n"
    "2023010101,bad,5.2\n"
)


def load_test_files() -> list[str]:
    """Read every CSV export in the test data directory."""
    return [
        path.read_text(encoding="utf-8")
        for path in sorted(TEST_DATA_DIR.glob("*.csv"))
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def simple_text() -> str:
    return SIMPLE_TEXT


@pytest.fixture()
def nbm_texts() -> list[str]:
    texts = load_test_files()
    if not texts:
        pytest.skip(f"No CSV files found in {TEST_DATA_DIR}")
    return texts


@pytest.fixture()
def kmso_text() -> str:
    return KMSO_CSV.read_text(encoding="utf-8")


@pytest.fixture()
def kgeg_text() -> str:
    return KGEG_CSV.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against sample NBM exports)",
    )
