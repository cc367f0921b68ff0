"""Service layer — validation pipeline and result envelope.

Services may import from domain and infrastructure layers.
They must never import from web, commands, or output.
"""
