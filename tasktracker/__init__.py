"""Minimal task tracker: FastAPI RPC server, SQLModel store and client."""
