# Fake implementations for testing

from .fake_chart_repo import FakeChartRepo
from .fake_oras_registry import FakeOrasChartRegistry

__all__ = ["FakeChartRepo", "FakeOrasChartRegistry"]
