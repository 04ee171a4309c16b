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
"""Tests for formula-based fallback positioning."""

from types import SimpleNamespace

import pytest

from sideline.engine.fallback import FallbackPositioner
from sideline.engine.geometry import Vector2D
from sideline.engine.possession import PossessionResolver
from sideline.models.agent import Agent


def _assert_close(actual: Vector2D, x: float, y: float) -> None:
    assert actual.x == pytest.approx(x)
    assert actual.y == pytest.approx(y)


class TestFallbackPositioner:
    """Tests for FallbackPositioner."""

    def test_neutral_pulls_toward_centre(self) -> None:
        """With nobody on the ball the target drifts toward the pitch centre."""
        target = FallbackPositioner().position_for("home", 1, Vector2D(10.0, 4.0), attacking=False, have_owner=False)
        _assert_close(target, 7.0, 2.8)

    def test_attacking_leads_the_ball(self) -> None:
        """Attackers push ahead of the ball along their goal axis."""
        positioner = FallbackPositioner()
        home = positioner.position_for("home", 0, Vector2D(0.0, 0.0), attacking=True, have_owner=True)
        away = positioner.position_for("away", 0, Vector2D(0.0, 0.0), attacking=True, have_owner=True)
        _assert_close(home, 0.3, -0.6)
        _assert_close(away, -0.3, -0.6)

    def test_defending_drops_toward_own_goal(self) -> None:
        """Defenders fall back between the ball and their own goal."""
        target = FallbackPositioner().position_for("home", 2, Vector2D(0.0, 0.0), attacking=False, have_owner=True)
        _assert_close(target, -2.6, 0.36)

    def test_role_offset_is_mirrored(self) -> None:
        """Away offsets mirror the home offsets along x."""
        positioner = FallbackPositioner()
        assert positioner.role_offset("home", 2) == Vector2D(1.5, 0.6)
        assert positioner.role_offset("away", 2) == Vector2D(-1.5, 0.6)

    def test_target_for_uses_agent_position_without_ball(self) -> None:
        """An unknown ball position anchors on the agent itself."""
        agent = Agent(agent_id=1, side="home", position=Vector2D(10.0, 0.0))
        possession = PossessionResolver()
        possession.observe(None, 0.0)
        ctx = SimpleNamespace(ball_position=None, possession=possession)
        target = FallbackPositioner().target_for(agent, ctx)  # type: ignore[arg-type]
        _assert_close(target, 7.0, 0.0)

    def test_loose_ball_in_grace_uses_neutral_formula(self) -> None:
        """Without an owner the neutral formula applies even while grace keeps the attack bank."""
        agent = Agent(agent_id=1, side="home", position=Vector2D(0.0, 0.0))
        possession = PossessionResolver()
        possession.observe(SimpleNamespace(side="home"), 0.0)
        possession.observe(None, 0.5)
        assert possession.effective_attacking("home")
        ctx = SimpleNamespace(ball_position=Vector2D(10.0, 0.0), possession=possession)
        target = FallbackPositioner().target_for(agent, ctx)  # type: ignore[arg-type]
        _assert_close(target, 7.0, 0.0)
