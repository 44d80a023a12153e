"""
Ticket Module
=============

Bounded context for the ticket lifecycle.

Responsibilities:
- Create tickets and apply versioned, concurrency-safe updates
- Threaded comments with a latest-comment summary on the ticket
- Append-only audit timeline, one event per changed field
- Role and ownership access rules
"""
