"""HTTP API package: FastAPI routes over the service clients and feed store."""
