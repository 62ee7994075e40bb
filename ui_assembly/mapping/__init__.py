"""Intent-to-instruction mapping.

WHY: Separates the generic ordered-rule mapper from the product's rule
table, so the table can change without touching the fold logic.

HOW: rules.py defines the rule building blocks, mapper.py folds matched
rules into one AssemblyInstruction, catalog.py holds the default rules
and the component catalog they draw from.

RULES:
- The mapper is pure: same intent + same rules → same instruction shape
- Only the ordered-predicate design is supported (no static type map)
"""
