"""JSON wire protocol between the decision service and the rendering surface.

WHY: The engine and the surface run in different processes; this
package defines the messages they exchange and nothing about how they
are carried.

HOW: schemas.py holds the JSON Schemas, codec.py converts between IR
dataclasses and validated wire dicts.

RULES:
- Inbound documents are always validated before use
- Outbound documents always validate against the same schemas
"""
