"""
Configuration management for Warncord.

- **app_configuration.py**: fcntl-locked YAML loader for ``config/app_config.yml``. Resolves the
  ``escalation`` section and the violation store's database path. Falls back to defaults on
  missing or malformed files.

- **escalation_config.py**: Frozen ``EscalationConfig`` passed explicitly to the orchestrator
  (lookback window, review threshold, first-offense cap, kill switch, dry-run, message deletion,
  excluded channels).
"""
