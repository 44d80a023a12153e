"""
SLA Monitoring Module
=====================

Bounded context for service level tracking.

Responsibilities:
- Compute the due timestamp for a ticket from its priority
- Flag overdue active tickets as breached, inline before reads and
  periodically in the background
"""
