"""api/ -- FastAPI application, transport models and route handlers.

Layer rule: api/ is the outermost layer. Nothing imports from it.
"""
