"""HTTP routers mounted under /api by api/main.py."""
