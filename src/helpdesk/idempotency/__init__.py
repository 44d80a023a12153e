"""
Idempotency Module
==================

Safe retries for mutating requests: a repeated ``Idempotency-Key``
returns the first response instead of running the request again.
"""
