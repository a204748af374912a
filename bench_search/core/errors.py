class BenchSourceError(Exception):
    """Raised when benches cannot be fetched from the data store."""
