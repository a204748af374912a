import logging
from typing import List, Optional

from elasticsearch import AsyncElasticsearch, ApiError, NotFoundError, TransportError
from pydantic import ValidationError

from bench_search.core.config import settings
from bench_search.core.errors import BenchSourceError
from bench_search.models import BenchRecord, Coordinates, SortKey, ViewType

logger = logging.getLogger(__name__)

WILDCARD_SPECIAL_CHARS = ("\\", "*", "?")

# The index measures arcs on a slightly larger sphere than haversine_km, so the
# geo_distance radius is widened; the ranker applies the exact cut-off.
GEO_DISTANCE_SLACK = 1.001
GEO_DISTANCE_MARGIN_KM = 0.01


def escape_wildcard(text: str) -> str:
    for ch in WILDCARD_SPECIAL_CHARS:
        text = text.replace(ch, "\\" + ch)
    return text


def geo_distance_radius(max_distance_km: float) -> str:
    return f"{max_distance_km * GEO_DISTANCE_SLACK + GEO_DISTANCE_MARGIN_KM}km"


class ESClient:
    def __init__(self):
        self.client = AsyncElasticsearch(settings.ES_HOST)
        self.index = settings.ES_INDEX

    def build_query(
        self,
        query: Optional[str],
        view_type: Optional[ViewType],
        origin: Optional[Coordinates] = None,
        max_distance_km: Optional[float] = None,
    ) -> dict:
        """
        Pre-filters pushed down to the index. Every one of them is a superset
        of the ranker's filter, which runs again on the recalled benches.
        Rating needs derived values and is left to the ranker.
        """
        filter_clauses = []

        text = (query or "").strip()
        if text:
            filter_clauses.append(
                {
                    "wildcard": {
                        "title.keyword": {
                            "value": f"*{escape_wildcard(text)}*",
                            "case_insensitive": True,
                        }
                    }
                }
            )

        if view_type is not None:
            filter_clauses.append({"term": {"view_type": ViewType(view_type).value}})

        if origin is not None and max_distance_km is not None:
            filter_clauses.append(
                {
                    "geo_distance": {
                        "distance": geo_distance_radius(max_distance_km),
                        "location": {"lat": origin.latitude, "lon": origin.longitude},
                    }
                }
            )

        if not filter_clauses:
            return {"match_all": {}}
        return {"bool": {"filter": filter_clauses}}

    def build_sort(
        self, sort_by: Optional[SortKey], origin: Optional[Coordinates] = None
    ) -> Optional[list]:
        """Index-side order, so a capped window keeps the benches ranked first."""
        if sort_by == SortKey.DISTANCE and origin is not None:
            return [
                {
                    "_geo_distance": {
                        "location": {"lat": origin.latitude, "lon": origin.longitude},
                        "order": "asc",
                        "unit": "km",
                    }
                }
            ]
        if sort_by == SortKey.RECENT:
            return [{"created_at": {"order": "desc"}}]
        return None

    async def search(
        self,
        query: Optional[str] = None,
        view_type: Optional[ViewType] = None,
        origin: Optional[Coordinates] = None,
        max_distance_km: Optional[float] = None,
        sort_by: Optional[SortKey] = None,
        size: Optional[int] = None,
    ) -> List[BenchRecord]:
        if size is None:
            size = settings.SEARCH_SIZE

        search_kwargs = {
            "index": self.index,
            "query": self.build_query(query, view_type, origin, max_distance_km),
            "size": size,
        }
        sort = self.build_sort(sort_by, origin)
        if sort is not None:
            search_kwargs["sort"] = sort

        try:
            resp = await self.client.search(**search_kwargs)
        except (ApiError, TransportError) as e:
            logger.exception("Bench search failed on index %s", self.index)
            raise BenchSourceError(f"bench search failed: {e}") from e

        total = resp["hits"].get("total")
        if isinstance(total, dict):
            total = total.get("value")
        if total is not None and total > size:
            logger.warning(
                "Bench search matched %d benches, only the first %d are ranked",
                total,
                size,
            )

        benches = []
        seen_ids = set()
        for hit in resp["hits"]["hits"]:
            if hit["_id"] in seen_ids:
                continue
            bench = self._parse_hit(hit)
            if bench is None:
                continue
            seen_ids.add(bench.id)
            benches.append(bench)

        logger.info(
            "Recalled %d benches (query=%r, view_type=%s)", len(benches), query, view_type
        )
        return benches

    async def get_bench(self, bench_id: str) -> Optional[BenchRecord]:
        try:
            resp = await self.client.get(index=self.index, id=bench_id)
        except NotFoundError:
            return None
        except (ApiError, TransportError) as e:
            logger.exception("Fetching bench %s failed", bench_id)
            raise BenchSourceError(f"fetching bench {bench_id} failed: {e}") from e
        return self._parse_hit(resp)

    def _parse_hit(self, hit) -> Optional[BenchRecord]:
        source = dict(hit["_source"])
        # geo_point is stored for index-side queries; the record keeps flat coordinates.
        # Only the object form is read, other geo_point forms fail validation below.
        location = source.pop("location", None)
        if isinstance(location, dict) and "latitude" not in source:
            source["latitude"] = location.get("lat")
            source["longitude"] = location.get("lon")
        source["id"] = hit["_id"]

        try:
            return BenchRecord.model_validate(source)
        except ValidationError as e:
            logger.warning("Skipping invalid bench %s: %s", hit["_id"], e)
            return None

    async def close(self):
        await self.client.close()


es_client = ESClient()
