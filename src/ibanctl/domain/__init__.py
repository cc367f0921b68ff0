"""Domain layer — IBAN rules, requests, and result models.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, web, commands, or config.
"""
