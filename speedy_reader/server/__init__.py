"""HTTP API for SpeedyReader (FastAPI). Run with ``speedy-reader-api``."""
