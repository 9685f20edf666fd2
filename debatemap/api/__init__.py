"""
HTTP driver for the debate map store.

Usage:
    uvicorn debatemap.api.server:app --reload
"""
