import sys
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

for candidate in (SRC, ROOT):
    path = str(candidate)
    if path not in sys.path:
        sys.path.insert(0, path)


@pytest.fixture
def metrics():
    from hub_search.observability.metrics import MetricsRegistry

    return MetricsRegistry(registry=CollectorRegistry())
