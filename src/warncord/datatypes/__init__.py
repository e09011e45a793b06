"""
Data types shared across Warncord.

- **violation_datatypes.py**: Violation enums, stored violation records and account standing data.
- **punishment_datatypes.py**: Classifier verdicts, mapped violations, orchestrator inputs/results
  and the violation repository interface.
"""
