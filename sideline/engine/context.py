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
"""Per-tick snapshot handed to every agent decision."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from sideline.engine.claims import SlotClaimRegistry
    from sideline.engine.directory import AgentDirectory
    from sideline.engine.geometry import Vector2D
    from sideline.engine.possession import PossessionResolver
    from sideline.models.agent import Agent, Side
    from sideline.models.formation import FormationCatalog
    from sideline.utils.debug import AssignmentDebugger


@dataclass
class TickContext:
    """Everything an agent may read while deciding, owned by the tick driver.

    Instances live for a single tick. Passing the context explicitly keeps the
    slot assigner a function of its inputs, so tests can build one by hand.

    Parameters
    ----------
    tick_id : int
        Monotonic tick counter.
    now : float
        Monotonic clock value in seconds.
    possession : PossessionResolver
        Possession memory already updated for this tick.
    catalog : FormationCatalog
        Shared formation banks.
    directory : AgentDirectory
        Agents currently on the pitch.
    registry : SlotClaimRegistry
        Claim ledger for this tick.
    human : Agent | None, optional
        Agent currently under human control, if any.
    ball_position : Vector2D | None, optional
        Ball position, or ``None`` when unknown.
    countdown_active : bool, optional
        Whether play is frozen for a kick-off countdown.
    debugger : AssignmentDebugger | None, optional
        Telemetry sink shared by all components.
    """

    tick_id: int
    now: float
    possession: "PossessionResolver"
    catalog: "FormationCatalog"
    directory: "AgentDirectory"
    registry: "SlotClaimRegistry"
    human: Optional["Agent"] = None
    ball_position: Optional["Vector2D"] = None
    countdown_active: bool = False
    debugger: Optional["AssignmentDebugger"] = None

    def human_teammate(self, side: "Side") -> Optional["Agent"]:
        """Return the human-controlled agent if it plays for ``side``.

        Parameters
        ----------
        side : Side
            Team being evaluated.

        Returns
        -------
        Agent | None
            The human agent, or ``None`` when absent or on the other side.
        """
        if self.human is not None and self.human.side == side:
            return self.human
        return None

    def is_human(self, agent: "Agent") -> bool:
        """Return whether ``agent`` is the human-controlled agent.

        Parameters
        ----------
        agent : Agent
            Agent to test.

        Returns
        -------
        bool
            ``True`` when ids match.
        """
        return self.human is not None and self.human.agent_id == agent.agent_id
