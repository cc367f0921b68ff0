"""HTTP surface — request handler, ASGI app, and server lifecycle.

May import from every lower layer. Commands wire it together.
"""
