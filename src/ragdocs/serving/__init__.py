"""
Serving: FastAPI application exposing the documentation tools.
"""
