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
"""Ball-chaser election.

Each side re-elects its chaser on a fixed interval rather than every tick so
two agents at nearly equal range do not trade the role back and forth.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from sideline.engine.config import ENGINE_CONFIG, ChaserConfig
from sideline.models.agent import Agent, Side

if TYPE_CHECKING:
    from sideline.engine.geometry import Vector2D
    from sideline.utils.debug import AssignmentDebugger


class RoleAssigner:
    """Elect one ball chaser per side by nearest distance.

    Parameters
    ----------
    config : ChaserConfig | None, optional
        Election cadence; defaults to ``ENGINE_CONFIG.chaser``.
    debugger : AssignmentDebugger | None, optional
        Receives a line whenever a side's chaser changes.
    """

    def __init__(
        self,
        config: Optional[ChaserConfig] = None,
        debugger: Optional["AssignmentDebugger"] = None,
    ) -> None:
        """Create an assigner with no elections held yet.

        Parameters
        ----------
        config : ChaserConfig | None, optional
            Election cadence; defaults to ``ENGINE_CONFIG.chaser``.
        debugger : AssignmentDebugger | None, optional
            Receives chaser changes.
        """
        self.config = config if config is not None else ENGINE_CONFIG.chaser
        self.debugger = debugger
        self._next_election: Dict[Side, float] = {}
        self._chasers: Dict[Side, Optional[int]] = {}

    def chaser_id(self, side: Side) -> Optional[int]:
        """Return the id of the current chaser for ``side``.

        Parameters
        ----------
        side : Side
            Team whose chaser is requested.

        Returns
        -------
        int | None
            Chaser id, or ``None`` before the first election or without a ball.
        """
        return self._chasers.get(side)

    def update(
        self,
        side: Side,
        candidates: List[Agent],
        ball_position: Optional["Vector2D"],
        now: float,
    ) -> Optional[Agent]:
        """Re-elect the chaser for ``side`` when its interval has elapsed.

        Parameters
        ----------
        side : Side
            Team being evaluated.
        candidates : List[Agent]
            AI-controlled agents of ``side``; the human agent must be excluded.
        ball_position : Vector2D | None
            Ball position, or ``None`` when the ball is unknown.
        now : float
            Monotonic clock value for the current tick.

        Returns
        -------
        Agent | None
            The chaser after this call.
        """
        if ball_position is None or not candidates:
            self._clear(side, candidates)
            return None

        current_id = self._chasers.get(side)
        current = next((a for a in candidates if a.agent_id == current_id), None)
        due = now >= self._next_election.get(side, float("-inf"))

        if current is not None and not due:
            self._apply(current, candidates)
            return current

        elected = self.elect(candidates, ball_position)
        self._next_election[side] = now + self.config.reassign_interval
        self._apply(elected, candidates)
        if elected.agent_id != current_id:
            self._chasers[side] = elected.agent_id
            if self.debugger:
                self.debugger.log_chaser(now, side, current_id, elected.agent_id)
        return elected

    @staticmethod
    def elect(candidates: List[Agent], ball_position: "Vector2D") -> Agent:
        """Pick the candidate nearest to the ball.

        Parameters
        ----------
        candidates : List[Agent]
            Non-empty list of eligible agents.
        ball_position : Vector2D
            Ball position at the evaluation instant.

        Returns
        -------
        Agent
            Nearest candidate; the lowest ``agent_id`` wins exact ties.
        """
        return min(candidates, key=lambda a: (a.distance_to(ball_position), a.agent_id))

    def is_pressing(self, agent: Agent, ball_position: Optional["Vector2D"]) -> bool:
        """Return whether a non-chaser is close enough to converge on the ball.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        ball_position : Vector2D | None
            Ball position, or ``None`` when unknown.

        Returns
        -------
        bool
            ``True`` for non-chasers within ``press_radius`` of the ball.
        """
        if ball_position is None or agent.is_chaser:
            return False
        return agent.distance_to(ball_position) <= self.config.press_radius

    def _apply(self, chaser: Agent, candidates: List[Agent]) -> None:
        """Flag ``chaser`` and clear the flag on every other candidate.

        Parameters
        ----------
        chaser : Agent
            Agent holding the role.
        candidates : List[Agent]
            All eligible agents of the side.
        """
        for agent in candidates:
            agent.is_chaser = agent is chaser

    def _clear(self, side: Side, candidates: List[Agent]) -> None:
        """Drop the chaser role for ``side``.

        Parameters
        ----------
        side : Side
            Team whose chaser is removed.
        candidates : List[Agent]
            Agents whose flags should be cleared.
        """
        for agent in candidates:
            agent.is_chaser = False
        self._chasers[side] = None
        self._next_election.pop(side, None)
