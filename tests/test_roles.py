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
"""Tests for ball-chaser election."""

from typing import List, Optional, Tuple

from sideline.engine.config import ChaserConfig
from sideline.engine.geometry import Vector2D
from sideline.engine.roles import RoleAssigner
from sideline.models.agent import Agent


class RecordingDebugger:
    """Collect chaser log calls."""

    def __init__(self) -> None:
        self.changes: List[Tuple[str, Optional[int], Optional[int]]] = []

    def log_chaser(self, match_time: float, side: str, previous_id: Optional[int], chaser_id: Optional[int]) -> None:
        self.changes.append((side, previous_id, chaser_id))


def _agent(agent_id: int, x: float, y: float = 0.0) -> Agent:
    return Agent(agent_id=agent_id, side="home", position=Vector2D(x, y))


BALL = Vector2D(0.0, 0.0)


class TestRoleAssigner:
    """Tests for RoleAssigner."""

    def test_elects_nearest_agent(self) -> None:
        """The agent closest to the ball chases; the flag is exclusive."""
        agents = [_agent(1, 5.0), _agent(2, 2.0), _agent(3, -3.0)]
        roles = RoleAssigner()
        chaser = roles.update("home", agents, BALL, now=0.0)
        assert chaser is agents[1]
        assert [a.is_chaser for a in agents] == [False, True, False]
        assert roles.chaser_id("home") == 2

    def test_tie_breaks_by_lowest_id(self) -> None:
        """Equidistant agents resolve to the lowest id."""
        agents = [_agent(9, 2.0), _agent(4, -2.0)]
        assert RoleAssigner.elect(agents, BALL).agent_id == 4

    def test_chaser_held_until_interval(self) -> None:
        """Re-election only happens once the interval has elapsed."""
        agents = [_agent(1, 1.0), _agent(2, 3.0)]
        roles = RoleAssigner(ChaserConfig(reassign_interval=0.5))
        roles.update("home", agents, BALL, now=0.0)
        agents[1].position = Vector2D(0.1, 0.0)
        assert roles.update("home", agents, BALL, now=0.3) is agents[0]
        assert agents[0].is_chaser and not agents[1].is_chaser
        assert roles.update("home", agents, BALL, now=0.5) is agents[1]
        assert agents[1].is_chaser and not agents[0].is_chaser

    def test_missing_chaser_forces_reelection(self) -> None:
        """A chaser that is no longer a candidate is replaced immediately."""
        agents = [_agent(1, 1.0), _agent(2, 3.0)]
        roles = RoleAssigner(ChaserConfig(reassign_interval=10.0))
        roles.update("home", agents, BALL, now=0.0)
        chaser = roles.update("home", agents[1:], BALL, now=0.1)
        assert chaser is agents[1]
        assert roles.chaser_id("home") == 2

    def test_no_ball_clears_flags(self) -> None:
        """Without a ball position nobody chases."""
        agents = [_agent(1, 1.0), _agent(2, 3.0)]
        roles = RoleAssigner()
        roles.update("home", agents, BALL, now=0.0)
        assert roles.update("home", agents, None, now=0.1) is None
        assert not any(a.is_chaser for a in agents)
        assert roles.chaser_id("home") is None

    def test_no_candidates(self) -> None:
        """An empty side has no chaser."""
        assert RoleAssigner().update("away", [], BALL, now=0.0) is None

    def test_sides_are_independent(self) -> None:
        """Each side keeps its own chaser and schedule."""
        home = [_agent(1, 1.0)]
        away = [Agent(agent_id=11, side="away", position=Vector2D(-1.0, 0.0))]
        roles = RoleAssigner()
        roles.update("home", home, BALL, now=0.0)
        roles.update("away", away, BALL, now=0.0)
        assert roles.chaser_id("home") == 1
        assert roles.chaser_id("away") == 11

    def test_is_pressing(self) -> None:
        """Non-chasers close to the ball press; chasers and distant agents do not."""
        roles = RoleAssigner(ChaserConfig(press_radius=1.0))
        near = _agent(1, 0.8)
        far = _agent(2, 4.0)
        assert roles.is_pressing(near, BALL)
        assert not roles.is_pressing(far, BALL)
        assert not roles.is_pressing(near, None)
        near.is_chaser = True
        assert not roles.is_pressing(near, BALL)

    def test_changes_are_logged(self) -> None:
        """The debugger hears about every change of chaser."""
        debugger = RecordingDebugger()
        agents = [_agent(1, 1.0), _agent(2, 3.0)]
        roles = RoleAssigner(ChaserConfig(reassign_interval=0.5), debugger=debugger)  # type: ignore[arg-type]
        roles.update("home", agents, BALL, now=0.0)
        roles.update("home", agents, BALL, now=0.6)
        agents[1].position = Vector2D(0.2, 0.0)
        roles.update("home", agents, BALL, now=1.2)
        assert debugger.changes == [("home", None, 1), ("home", 1, 2)]
