"""
Load benches from a JSON file into the Elasticsearch index.

Usage: python -m bench_search.ingest [path/to/benches.json]

The file holds a JSON list of bench objects shaped like BenchRecord. Benches
that fail validation are logged and skipped.
"""
import json
import logging
import os
import sys

from elasticsearch import Elasticsearch, helpers
from pydantic import ValidationError

from bench_search.core.config import settings
from bench_search.core.logging_setup import setup_logging
from bench_search.models import BenchRecord

logger = logging.getLogger(__name__)

INDEX_MAPPINGS = {
    "properties": {
        "title": {
            "type": "text",
            "analyzer": "standard",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
        },
        "description": {"type": "text", "analyzer": "standard"},
        "accessibility_notes": {"type": "text", "analyzer": "standard"},
        "user_id": {"type": "keyword"},
        "latitude": {"type": "double"},
        "longitude": {"type": "double"},
        "location": {"type": "geo_point"},
        "view_type": {"type": "keyword"},
        "created_at": {"type": "date"},
        "ratings": {
            "properties": {
                "view_rating": {"type": "byte"},
                "comfort_rating": {"type": "byte"},
            }
        },
    }
}


def bench_to_action(bench: BenchRecord, index: str) -> dict:
    source = bench.model_dump(mode="json", exclude={"id"})
    source["location"] = {"lat": bench.latitude, "lon": bench.longitude}
    return {"_index": index, "_id": bench.id, "_source": source}


class BenchIngester:
    def __init__(self, es=None, index=None, batch_size=None):
        self.es = es if es is not None else Elasticsearch(settings.ES_HOST)
        self.index = index or settings.ES_INDEX
        self.batch_size = batch_size or settings.INGEST_BATCH_SIZE
        self.buffer = []
        self.count = 0
        self.skipped = 0

    def create_index(self):
        if not self.es.indices.exists(index=self.index):
            self.es.indices.create(index=self.index, mappings=INDEX_MAPPINGS)
            logger.info("Created index %s", self.index)

    def add(self, raw: dict):
        try:
            bench = BenchRecord.model_validate(raw)
        except ValidationError as e:
            self.skipped += 1
            bench_id = raw.get("id") if isinstance(raw, dict) else raw
            logger.warning("Skipping invalid bench %r: %s", bench_id, e)
            return

        self.buffer.append(bench_to_action(bench, self.index))
        self.count += 1
        if len(self.buffer) >= self.batch_size:
            self.flush()

    def flush(self):
        if self.buffer:
            success, _ = helpers.bulk(self.es, self.buffer)
            logger.info("Indexed %d documents", success)
            self.buffer = []

    def ingest(self, benches):
        self.create_index()
        for raw in benches:
            self.add(raw)
        self.flush()
        logger.info("Ingestion complete: %d indexed, %d skipped", self.count, self.skipped)
        return self.count


def main(argv=None):
    setup_logging()
    argv = sys.argv[1:] if argv is None else argv
    path = argv[0] if argv else settings.BENCH_DATA_PATH

    if not os.path.exists(path):
        logger.error("File %s not found.", path)
        return 1

    with open(path, encoding="utf-8") as f:
        benches = json.load(f)

    BenchIngester().ingest(benches)
    return 0


if __name__ == "__main__":
    sys.exit(main())
