import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    APP_LOG_FILENAME = os.getenv("APP_LOG_FILENAME", "search_app.log")
    APP_LOG_PATH = os.path.join(LOG_DIR, APP_LOG_FILENAME)

    # Elasticsearch
    ES_HOST = os.getenv("ES_HOST", "http://localhost:9200")
    ES_INDEX = os.getenv("ES_INDEX", "benches_v1")

    # Search Application
    APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
    APP_PORT = int(os.getenv("APP_PORT", "8000"))

    # Recall
    SEARCH_SIZE = int(os.getenv("SEARCH_SIZE", "1000"))

    # Ingestion
    BENCH_DATA_PATH = os.getenv("BENCH_DATA_PATH", "data/benches.json")
    INGEST_BATCH_SIZE = int(os.getenv("INGEST_BATCH_SIZE", "500"))


settings = Settings()
