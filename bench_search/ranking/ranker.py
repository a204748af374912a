import logging
from typing import Iterable, List, Optional

from bench_search.geo.distance import haversine_km
from bench_search.models import (
    BenchRecord,
    Coordinates,
    RankedResult,
    SearchQuery,
    SortKey,
)

logger = logging.getLogger(__name__)

# Ranking an already ranked list recomputes the derived fields
BENCH_FIELDS = set(BenchRecord.model_fields)


def average_rating(record: BenchRecord) -> float:
    """Mean over the pooled view and comfort scores, 0 when unrated."""
    if not record.ratings:
        return 0.0
    total_view = sum(r.view_rating for r in record.ratings)
    total_comfort = sum(r.comfort_rating for r in record.ratings)
    return (total_view + total_comfort) / (2 * len(record.ratings))


def distance_from(origin: Optional[Coordinates], record: BenchRecord) -> Optional[float]:
    if origin is None:
        return None
    return haversine_km(
        origin.latitude, origin.longitude, record.latitude, record.longitude
    )


class GeoSearchRanker:
    def rank(
        self, records: Iterable[BenchRecord], query: SearchQuery
    ) -> List[RankedResult]:
        records = list(records)
        total = len(records)

        # 1. Text (case-insensitive substring of the title)
        needle = (query.query or "").strip().lower()
        if needle:
            records = [r for r in records if needle in r.title.lower()]

        # 2. Category
        if query.view_type is not None:
            records = [r for r in records if r.view_type == query.view_type]

        # 3. Derived fields; input records are copied, never touched
        ranked_results = [
            RankedResult(
                **r.model_dump(include=BENCH_FIELDS),
                average_rating=average_rating(r),
                distance_km=distance_from(query.origin, r),
                ratings_count=len(r.ratings),
            )
            for r in records
        ]

        # 4. Distance (inert for benches without a distance)
        if query.max_distance_km is not None:
            ranked_results = [
                r
                for r in ranked_results
                if r.distance_km is None or r.distance_km <= query.max_distance_km
            ]

        # 5. Rating
        if query.min_rating is not None:
            ranked_results = [
                r for r in ranked_results if r.average_rating >= query.min_rating
            ]

        # Sort (list.sort is stable, also with reverse=True)
        if query.sort_by == SortKey.DISTANCE:
            ranked_results.sort(
                key=lambda x: (x.distance_km is None, x.distance_km or 0.0)
            )
        elif query.sort_by == SortKey.RATING:
            ranked_results.sort(key=lambda x: x.average_rating, reverse=True)
        elif query.sort_by == SortKey.RECENT:
            ranked_results.sort(key=lambda x: x.created_at, reverse=True)

        logger.debug("Ranked %d of %d benches", len(ranked_results), total)
        return ranked_results


ranker = GeoSearchRanker()
