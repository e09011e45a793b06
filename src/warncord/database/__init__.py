"""
Database package for Warncord.

SQLite storage of violations with performance monitoring and a single
serialised-writer connection.

Public API:
    - ViolationStore: SQLite implementation of the violation repository
"""
