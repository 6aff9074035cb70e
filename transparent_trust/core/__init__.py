"""Shared domain logic, persistence and infrastructure helpers."""
