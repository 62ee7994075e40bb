"""HTTP/WebSocket service around the assembly engine.

WHY: Gives out-of-process classifiers and rendering surfaces a way to
drive and observe per-session engines.

HOW: sessions.py holds the session store and per-session pipeline,
models.py the pydantic schemas, app.py the FastAPI routes.
"""
