# tests/conftest.py
import sys
from pathlib import Path

import matplotlib
import pytest

# Resolve repo root no matter where pytest is run from
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

matplotlib.use("Agg")

from seggt.core.bbox import NormalizedBBox  # noqa: E402


@pytest.fixture
def make_box():
    def _make(xmin, ymin, xmax, ymax, label, difficult=False):
        return NormalizedBBox(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax, label=label, difficult=difficult)

    return _make
