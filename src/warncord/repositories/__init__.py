"""
Row-level repositories over the Warncord database.

- **violation_repo.py**: CRUD for the ``violations`` table.
"""
