"""
Shared Kernel Module
====================

Generic infrastructure and API plumbing used by every bounded context
(tickets, identity, SLA, idempotency).

Architecture Pattern: Modular Monolith
- Each module is a bounded context with its own layers
- Shared kernel contains only generic infrastructure
- Domain models live within each module

DO NOT add ticket or account business rules to the shared kernel.
"""
