"""Domain layer: value objects, entities, services and errors.

The domain holds the relational model (databases, tables, columns, rows)
and the rules that keep it consistent. It has no knowledge of SQL text.
"""
