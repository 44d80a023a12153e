"""
Identity Module
===============

Bounded context for accounts and authentication.

Responsibilities:
- Register requesters and authenticate users with email and password
- Issue and verify signed bearer tokens (subject id + role)
- Let admins change roles
- List the support team (agents and admins)
"""
