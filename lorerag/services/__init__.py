"""Application services: ingestion, retrieval and the embedding gateway."""
