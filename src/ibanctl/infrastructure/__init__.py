"""Infrastructure layer — response cache, pid file guard, bank registry store.

This layer depends on stdlib and the domain contracts it implements.
It must never import from services, web, commands, or output.
"""
