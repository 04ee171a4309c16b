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
"""Team-indexed directory of the agents currently on the pitch."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from sideline.models.agent import SIDES, Agent, Side


class AgentDirectory:
    """Registry populated by spawn/despawn hooks instead of scene-wide queries.

    Iteration order is registration order, which gives the tick driver a
    stable evaluation order.
    """

    def __init__(self) -> None:
        """Create an empty directory."""
        self._agents: Dict[int, Agent] = {}
        self._by_side: Dict[Side, List[Agent]] = {side: [] for side in SIDES}

    def register(self, agent: Agent) -> None:
        """Add ``agent`` to the directory.

        Parameters
        ----------
        agent : Agent
            Newly spawned agent.

        Raises
        ------
        ValueError
            When another agent already uses the same id.
        """
        if agent.agent_id in self._agents:
            raise ValueError(f"Agent id {agent.agent_id} is already registered")
        self._agents[agent.agent_id] = agent
        self._by_side[agent.side].append(agent)

    def unregister(self, agent_id: int) -> Optional[Agent]:
        """Remove the agent with ``agent_id`` if present.

        Parameters
        ----------
        agent_id : int
            Identifier of the despawning agent.

        Returns
        -------
        Agent | None
            The removed agent, or ``None`` when it was not registered.
        """
        agent = self._agents.pop(agent_id, None)
        if agent is not None:
            self._by_side[agent.side].remove(agent)
        return agent

    def get(self, agent_id: int) -> Optional[Agent]:
        """Look up an agent by id.

        Parameters
        ----------
        agent_id : int
            Identifier to resolve.

        Returns
        -------
        Agent | None
            Matching agent or ``None``.
        """
        return self._agents.get(agent_id)

    def team(self, side: Side) -> List[Agent]:
        """Return a copy of the agents playing for ``side``.

        Parameters
        ----------
        side : Side
            Team to list.

        Returns
        -------
        List[Agent]
            Agents in registration order.
        """
        return list(self._by_side[side])

    def teammates(self, agent: Agent) -> List[Agent]:
        """Return every other agent on ``agent``'s side.

        Parameters
        ----------
        agent : Agent
            Reference agent, excluded from the result.

        Returns
        -------
        List[Agent]
            Teammates in registration order.
        """
        return [p for p in self._by_side[agent.side] if p.agent_id != agent.agent_id]

    def __iter__(self) -> Iterator[Agent]:
        """Iterate over all agents in registration order."""
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        """Return the number of registered agents."""
        return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        """Return whether an agent with ``agent_id`` is registered."""
        return agent_id in self._agents
