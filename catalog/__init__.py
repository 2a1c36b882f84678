"""catalog/ -- Product catalog: query translation, persistence and item operations.

Layer rule: catalog/ may import from auth/ and core/, never from api/.
"""
