"""
Infrastructure Layer
=====================

Cross-cutting technical concerns shared by all bounded contexts.
"""
