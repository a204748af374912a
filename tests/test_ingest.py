import json
from unittest.mock import MagicMock, patch

from bench_search.ingest import INDEX_MAPPINGS, BenchIngester, bench_to_action, main
from bench_search.models import BenchRecord

RAW_BENCHES = [
    {
        "id": "1",
        "title": "Pier Bench",
        "latitude": 34.01,
        "longitude": -118.49,
        "view_type": "ocean",
        "created_at": "2024-01-01T00:00:00Z",
        "ratings": [{"view_rating": 5, "comfort_rating": 3}],
    },
    {
        "id": "2",
        "title": "Broken Bench",
        "latitude": 95,
        "longitude": 0,
        "view_type": "ocean",
        "created_at": "2024-01-01T00:00:00Z",
    },
    {
        "id": "3",
        "title": "Ridge Bench",
        "latitude": 46.5,
        "longitude": 8.0,
        "view_type": "mountain",
        "created_at": "2024-02-01T00:00:00Z",
    },
]


def test_bench_to_action():
    bench = BenchRecord.model_validate(RAW_BENCHES[0])
    action = bench_to_action(bench, "benches_test")

    assert action["_index"] == "benches_test"
    assert action["_id"] == "1"
    source = action["_source"]
    assert "id" not in source
    assert source["location"] == {"lat": 34.01, "lon": -118.49}
    assert source["view_type"] == "ocean"
    assert source["ratings"] == [{"view_rating": 5, "comfort_rating": 3}]


def test_ingest_creates_index_and_skips_invalid():
    es = MagicMock()
    es.indices.exists.return_value = False

    with patch("bench_search.ingest.helpers.bulk", return_value=(1, [])) as mock_bulk:
        ingester = BenchIngester(es=es, index="benches_test", batch_size=1)
        count = ingester.ingest(RAW_BENCHES)

    es.indices.create.assert_called_once_with(index="benches_test", mappings=INDEX_MAPPINGS)
    assert count == 2
    assert ingester.skipped == 1
    # batch size 1: one bulk call per valid bench
    assert mock_bulk.call_count == 2
    indexed_ids = [call.args[1][0]["_id"] for call in mock_bulk.call_args_list]
    assert indexed_ids == ["1", "3"]


def test_ingest_keeps_existing_index():
    es = MagicMock()
    es.indices.exists.return_value = True

    with patch("bench_search.ingest.helpers.bulk", return_value=(2, [])) as mock_bulk:
        BenchIngester(es=es, index="benches_test", batch_size=100).ingest(RAW_BENCHES)

    es.indices.create.assert_not_called()
    assert mock_bulk.call_count == 1
    assert len(mock_bulk.call_args.args[1]) == 2


def test_main_reads_file(tmp_path):
    path = tmp_path / "benches.json"
    path.write_text(json.dumps(RAW_BENCHES), encoding="utf-8")

    with patch("bench_search.ingest.setup_logging"), patch(
        "bench_search.ingest.BenchIngester"
    ) as MockIngester:
        assert main([str(path)]) == 0

    MockIngester.return_value.ingest.assert_called_once_with(RAW_BENCHES)


def test_main_missing_file(tmp_path):
    with patch("bench_search.ingest.setup_logging"):
        assert main([str(tmp_path / "nope.json")]) == 1


def test_ingest_skips_non_object_entries():
    es = MagicMock()
    es.indices.exists.return_value = True

    with patch("bench_search.ingest.helpers.bulk", return_value=(2, [])) as mock_bulk:
        ingester = BenchIngester(es=es, index="benches_test", batch_size=100)
        count = ingester.ingest(["not a bench", RAW_BENCHES[0], 42, None, RAW_BENCHES[2]])

    assert count == 2
    assert ingester.skipped == 3
    assert [a["_id"] for a in mock_bulk.call_args.args[1]] == ["1", "3"]
