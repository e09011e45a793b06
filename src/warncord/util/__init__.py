"""
Shared helpers for Warncord.

- **logger.py**: Console (prompt_toolkit) and rotating-file logging used by every module.
- **clock.py**: Injectable UTC time source used by the time-based predicates.
- **discord_utils.py**: Best-effort deletion of flagged Discord messages and member timeouts.
"""
