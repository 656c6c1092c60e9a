"""Adapters layer - concrete implementations at the edge of the engine.

Adapters translate between the outside world and the domain:
- Inbound adapters: Decode incoming statements (SQL text) into plans
"""

from minisql.adapters.inbound import ParseError, SQLParser

__all__ = [
    "ParseError",
    "SQLParser",
]
