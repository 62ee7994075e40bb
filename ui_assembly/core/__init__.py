"""Core assembly modules: data model, registry, layout, lifecycle, engine.

WHY: The core package holds the stable heart of the system: the IR
dataclasses and the engine that applies instructions to the active
component set. The mapper, the codec, and the server all build on it.

HOW: ir.py defines the data structures, registry.py the component
table, layout.py the position solver, lifecycle.py the allowed state
transitions, engine.py the instruction applier.

RULES:
- IR dataclasses are the wire contract; change them together with the codec
- layout.py is pure; engine.py is the only owner of mutable component state
"""
