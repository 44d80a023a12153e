from helpdesk.idempotency.infrastructure.models import IdempotencyRecordModel
from helpdesk.idempotency.infrastructure.repositories import SQLAlchemyIdempotencyRepository

__all__ = ["IdempotencyRecordModel", "SQLAlchemyIdempotencyRepository"]
