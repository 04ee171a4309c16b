# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for possession memory and bank selection."""

from types import SimpleNamespace
from typing import List, Tuple

import pytest

from sideline.engine.config import PossessionConfig
from sideline.engine.possession import PossessionResolver


class RecordingDebugger:
    """Collect possession log calls."""

    def __init__(self) -> None:
        self.lines: List[Tuple[float, str]] = []

    def log_possession(self, match_time: float, label: str) -> None:
        self.lines.append((match_time, label))


HOME_OWNER = SimpleNamespace(side="home")
AWAY_OWNER = SimpleNamespace(side="away")


class TestPossessionResolver:
    """Tests for PossessionResolver."""

    def test_never_owned_is_neutral(self) -> None:
        """Without any owner both sides use the neutral bank."""
        resolver = PossessionResolver()
        resolver.observe(None, 0.0)
        assert not resolver.have_owner()
        assert resolver.bank_type_for("home") == "neutral"
        assert resolver.bank_type_for("away") == "neutral"
        assert resolver.describe() == "neutral"

    def test_owned_ball(self) -> None:
        """The owner attacks and the other side defends."""
        resolver = PossessionResolver()
        resolver.observe(HOME_OWNER, 1.0)
        assert resolver.have_owner()
        assert resolver.effective_attacking("home")
        assert not resolver.effective_attacking("away")
        assert resolver.bank_type_for("home") == "attack"
        assert resolver.bank_type_for("away") == "defend"
        assert resolver.describe() == "owned:home"

    def test_grace_period_keeps_attack(self) -> None:
        """Losing the ball keeps the attack bank for the grace period, then neutral."""
        resolver = PossessionResolver(PossessionConfig(grace_period=2.0))
        resolver.observe(HOME_OWNER, 0.0)
        resolver.observe(None, 1.0)
        resolver.observe(None, 2.5)
        assert resolver.grace_active()
        assert resolver.bank_type_for("home") == "attack"
        assert resolver.bank_type_for("away") == "neutral"
        assert resolver.describe() == "grace:home"

        resolver.observe(None, 3.0)
        assert not resolver.grace_active()
        assert resolver.bank_type_for("home") == "neutral"
        assert resolver.describe() == "neutral"

    def test_grace_measured_from_first_loose_tick(self) -> None:
        """Repeated loose observations do not restart the grace window."""
        resolver = PossessionResolver(PossessionConfig(grace_period=2.0))
        resolver.observe(AWAY_OWNER, 0.0)
        resolver.observe(None, 0.5)
        resolver.observe(None, 1.5)
        assert resolver.no_owner_since == 0.5
        resolver.observe(None, 2.6)
        assert resolver.bank_type_for("away") == "neutral"

    def test_new_owner_ends_grace(self) -> None:
        """A new owner replaces the remembered side immediately."""
        resolver = PossessionResolver()
        resolver.observe(HOME_OWNER, 0.0)
        resolver.observe(None, 0.1)
        resolver.observe(AWAY_OWNER, 0.2)
        assert resolver.bank_type_for("away") == "attack"
        assert resolver.bank_type_for("home") == "defend"
        assert resolver.no_owner_since is None

    def test_transitions_are_logged_once(self) -> None:
        """Only changes of the effective state reach the debugger."""
        debugger = RecordingDebugger()
        resolver = PossessionResolver(PossessionConfig(grace_period=1.0), debugger=debugger)  # type: ignore[arg-type]
        resolver.observe(HOME_OWNER, 0.0)
        resolver.observe(HOME_OWNER, 0.1)
        resolver.observe(None, 0.2)
        resolver.observe(None, 0.3)
        resolver.observe(None, 1.5)
        assert [label for _, label in debugger.lines] == ["owned:home", "grace:home", "neutral"]
        assert debugger.lines[-1][0] == pytest.approx(1.5)
