"""
Escalation engine for Warncord.

This package turns a classifier verdict and a user's violation history into a
punishment decision:

- **rule_catalog.py**: Static policy tables (section defaults, per-rule overrides,
  severe rules, escalation matrix, type priority, restrictions, scores, durations).

- **section_mapper.py**: Parses rule ids into sections and merges a batch of rule
  ids into one ``MappedViolation``.

- **severity_calculator.py**: Offense count to severity via the escalation matrix.

- **escalation_policy.py**: First-offense cap and manual-review routing.

- **restriction_resolver.py**: Violation type and severity to feature restrictions.

- **expiration_policy.py**: Violation lifetimes and enforcement adjustments.

- **account_standing.py**: Severity score and standing classification of a user.

- **restriction_applier.py**: Discord enforcement (platform timeouts) of issued violations.

- **punishment_orchestrator.py**: Top-level entry point with dry-run and live modes,
  plus the moderator alert text.
"""
