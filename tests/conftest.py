from datetime import datetime, timezone

import pytest

from bench_search.models import BenchRecord


@pytest.fixture
def make_bench():
    def _make_bench(
        id,
        title="Bench",
        view_type="other",
        lat=0.0,
        lon=0.0,
        ratings=(),
        created_at=None,
    ):
        return BenchRecord(
            id=str(id),
            title=title,
            view_type=view_type,
            latitude=lat,
            longitude=lon,
            created_at=created_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
            ratings=[
                {"view_rating": v, "comfort_rating": c} for v, c in ratings
            ],
        )

    return _make_bench
