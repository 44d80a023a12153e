from helpdesk.idempotency.interfaces.middleware import IdempotencyMiddleware, hash_request

__all__ = ["IdempotencyMiddleware", "hash_request"]
