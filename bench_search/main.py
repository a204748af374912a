import logging

import uvicorn
from fastapi import FastAPI, HTTPException

from bench_search.core.config import settings
from bench_search.core.errors import BenchSourceError
from bench_search.core.logging_setup import setup_logging
from bench_search.models import BenchRecord, SearchRequest, SearchResponse
from bench_search.ranking.ranker import ranker
from bench_search.recall.es_client import es_client

logger = logging.getLogger(__name__)

app = FastAPI(title="Bench Search Service", version="1.0")


@app.on_event("startup")
async def startup_event():
    setup_logging()
    logger.info("Bench search using index %s at %s", settings.ES_INDEX, settings.ES_HOST)


@app.on_event("shutdown")
async def shutdown_event():
    await es_client.close()


@app.post("/search", response_model=SearchResponse)
async def search(req: SearchRequest):
    query = req.to_search_query()

    # 1. Recall Phase
    # Index-side filters and order narrow the fetch; the ranker re-applies every filter
    try:
        candidates = await es_client.search(
            query=query.query,
            view_type=query.view_type,
            origin=query.origin,
            max_distance_km=query.max_distance_km,
            sort_by=query.sort_by,
        )
    except BenchSourceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    # 2. Ranking Phase
    results = ranker.rank(candidates, query)

    return SearchResponse(results=results, total=len(results))


@app.get("/benches/{bench_id}", response_model=BenchRecord)
async def get_bench(bench_id: str):
    try:
        bench = await es_client.get_bench(bench_id)
    except BenchSourceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if bench is None:
        raise HTTPException(status_code=404, detail=f"Bench {bench_id} not found")
    return bench


@app.get("/health")
async def health():
    return {"status": "ok", "elasticsearch": settings.ES_HOST}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
