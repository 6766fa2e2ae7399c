"""Pure domain code: declaration schema, route patterns, route tables, errors.

Nothing in here knows about FastAPI, asyncio or file watching, so the loader
and compiler can run in a worker thread while the previous table is served.
"""
__all__ = ["declaration", "errors", "patterns", "routes"]
