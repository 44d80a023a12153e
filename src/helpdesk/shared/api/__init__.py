"""
Shared API Layer
================

Middleware, exception handlers and rate limiting shared by every router.
"""
