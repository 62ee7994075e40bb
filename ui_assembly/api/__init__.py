"""Client for the UI Assembly Engine HTTP API.

WHY: Decision processes that run apart from the service need a typed
way to push intents and instructions and read snapshots back.

HOW: client.py provides AssemblyClient (httpx-based, async context
manager) and AssemblyAPIError.

RULES:
- All requests go through the protocol codec; no hand-built JSON
"""
