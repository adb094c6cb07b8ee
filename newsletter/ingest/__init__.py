from .service import IngestionService, validate_url

__all__ = ["IngestionService", "validate_url"]
