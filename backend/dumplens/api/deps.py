from dumplens.services.ingest_service import IngestService, ingest_service


def get_ingest_service() -> IngestService:
    """Shared ingest service; overridden in tests to point at a temporary data root."""
    return ingest_service
