"""
Pytest configuration and fixtures for Warncord tests.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from warncord.datatypes.violation_datatypes import Violation, ViolationSeverity, ViolationType  # noqa: E402
from warncord.util.clock import fixed_clock  # noqa: E402

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def clock():
    return fixed_clock(NOW)


@pytest.fixture()
def make_violation():
    """Factory for stored violations; every field can be overridden."""
    counter = {"next_id": 1}

    def _make(**overrides) -> Violation:
        fields = {
            "id": counter["next_id"],
            "user_id": 42,
            "guild_id": 1,
            "type": ViolationType.TOXICITY,
            "severity": ViolationSeverity.LOW,
            "policy_violated": "101",
            "reason": "AI Detection: rude",
            "issued_at": NOW,
            "issued_by": 0,
        }
        fields.update(overrides)
        counter["next_id"] += 1
        return Violation(**fields)

    return _make
