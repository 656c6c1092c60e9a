"""
minisql - In-memory relational query engine

A single-node relational engine covering the statement forms of an
introductory SQL course: databases and typed tables, inserts with defaults
and auto-increment, filtered/sorted/limited selection, pattern matching,
string functions, update and delete.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
