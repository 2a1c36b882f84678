"""core/ -- Settings and the domain error taxonomy shared by every layer.

Layer rule: core/ imports only stdlib and third-party libraries.
"""
