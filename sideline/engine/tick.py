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
"""Fixed-tick driver that turns world state into per-agent movement intents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sideline.engine.claims import SlotClaimRegistry
from sideline.engine.config import ENGINE_CONFIG, EngineConfig
from sideline.engine.context import TickContext
from sideline.engine.directory import AgentDirectory
from sideline.engine.fallback import FallbackPositioner
from sideline.engine.geometry import Vector2D
from sideline.engine.possession import PossessionResolver
from sideline.engine.roles import RoleAssigner
from sideline.engine.slot_assigner import SlotAssigner
from sideline.engine.steering import IntentSteering
from sideline.models.agent import SIDES, Agent, AgentMode
from sideline.models.formation import BankType, FormationCatalog
from sideline.utils.debug import AssignmentDebugger


@dataclass(slots=True)
class AgentIntent:
    """Output of one agent for one tick.

    Parameters
    ----------
    agent_id : int
        Agent the intent belongs to.
    intent : Vector2D
        Movement direction of length at most 1; zero means hold.
    is_chaser : bool
        Whether the agent is its side's ball chaser.
    mode : AgentMode
        What the agent did this tick.
    target : Vector2D | None, optional
        Position the intent steers toward, when there is one.
    bank_type : BankType | None, optional
        Bank context used for slot decisions.
    slot_index : int | None, optional
        Claimed slot, if the agent holds one.
    """

    agent_id: int
    intent: Vector2D
    is_chaser: bool
    mode: AgentMode
    target: Optional[Vector2D] = None
    bank_type: Optional[BankType] = None
    slot_index: Optional[int] = None


class SquadCoordinator:
    """Own every assignment component and run them once per tick.

    Parameters
    ----------
    catalog : FormationCatalog | None, optional
        Shared formation banks; an empty catalog sends everyone to fallback.
    config : EngineConfig | None, optional
        Tuning blocks; defaults to ``ENGINE_CONFIG``.
    debugger : AssignmentDebugger | None, optional
        Telemetry sink shared with every component.
    """

    def __init__(
        self,
        catalog: Optional[FormationCatalog] = None,
        config: Optional[EngineConfig] = None,
        debugger: Optional[AssignmentDebugger] = None,
    ) -> None:
        """Build the component graph.

        Parameters
        ----------
        catalog : FormationCatalog | None, optional
            Shared formation banks.
        config : EngineConfig | None, optional
            Tuning blocks; defaults to ``ENGINE_CONFIG``.
        debugger : AssignmentDebugger | None, optional
            Telemetry sink shared with every component.
        """
        self.config = config if config is not None else ENGINE_CONFIG
        self.catalog = catalog if catalog is not None else FormationCatalog()
        self.debugger = debugger
        self.directory = AgentDirectory()
        self.registry = SlotClaimRegistry()
        self.possession = PossessionResolver(self.config.possession, debugger)
        self.roles = RoleAssigner(self.config.chaser, debugger)
        self.assigner = SlotAssigner(self.config.slots, FallbackPositioner(self.config.fallback))
        self.steering = IntentSteering(self.config.steering)
        self.tick_id = 0
        self.last_context: Optional[TickContext] = None

    def add_agents(self, agents: Iterable[Agent]) -> None:
        """Register several agents in evaluation order.

        Parameters
        ----------
        agents : Iterable[Agent]
            Agents to add; ids must be unique.
        """
        for agent in agents:
            self.directory.register(agent)

    def remove_agent(self, agent_id: int) -> Optional[Agent]:
        """Remove an agent from future ticks.

        Parameters
        ----------
        agent_id : int
            Id of the agent leaving the pitch.

        Returns
        -------
        Agent | None
            The removed agent, or ``None`` if it was not registered.
        """
        return self.directory.unregister(agent_id)

    def step(
        self,
        now: float,
        ball_owner: Optional[Agent] = None,
        ball_position: Optional[Vector2D] = None,
        human: Optional[Agent] = None,
        countdown_active: bool = False,
    ) -> Dict[int, AgentIntent]:
        """Advance one tick and return an intent for every registered agent.

        Parameters
        ----------
        now : float
            Monotonic clock value in seconds.
        ball_owner : Agent | None, optional
            Agent holding the ball, if any.
        ball_position : Vector2D | None, optional
            Ball position, or ``None`` when unknown.
        human : Agent | None, optional
            Agent currently driven by a human player.
        countdown_active : bool, optional
            Freeze AI movement for a kick-off countdown.

        Returns
        -------
        Dict[int, AgentIntent]
            Intents keyed by agent id, in evaluation order.
        """
        self.tick_id += 1
        self.possession.observe(ball_owner, now)
        self.registry.begin_tick(self.tick_id)
        ctx = TickContext(
            tick_id=self.tick_id,
            now=now,
            possession=self.possession,
            catalog=self.catalog,
            directory=self.directory,
            registry=self.registry,
            human=human,
            ball_position=ball_position,
            countdown_active=countdown_active,
            debugger=self.debugger,
        )
        self.last_context = ctx

        if not countdown_active:
            for side in SIDES:
                candidates = [agent for agent in self.directory.team(side) if not ctx.is_human(agent)]
                self.roles.update(side, candidates, ball_position, now)

        agents = list(self.directory)
        # Modes first so every slot decision sees this tick's rivals.
        for agent in agents:
            self._set_mode(agent, ctx)

        intents = {agent.agent_id: self._decide(agent, ctx) for agent in agents}

        if self.debugger:
            self.debugger.log_tick(
                now,
                self.tick_id,
                self.possession.describe(),
                {side: self.roles.chaser_id(side) for side in SIDES},
                sum(1 for result in intents.values() if result.slot_index is not None),
            )
        return intents

    def _set_mode(self, agent: Agent, ctx: TickContext) -> None:
        """Classify ``agent`` for this tick and release slots it no longer seeks.

        Parameters
        ----------
        agent : Agent
            Agent being classified.
        ctx : TickContext
            Snapshot of the current tick.
        """
        if ctx.is_human(agent):
            agent.mode = "human"
            agent.is_chaser = False
        elif ctx.countdown_active:
            agent.mode = "idle"
            return
        elif agent.is_chaser and ctx.ball_position is not None:
            agent.mode = "chase"
        elif self.roles.is_pressing(agent, ctx.ball_position):
            agent.mode = "press"
        else:
            agent.mode = "slot"
            return
        agent.release_slot()

    def _decide(self, agent: Agent, ctx: TickContext) -> AgentIntent:
        """Produce the intent for an already classified agent.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        ctx : TickContext
            Snapshot of the current tick.

        Returns
        -------
        AgentIntent
            Movement intent and bookkeeping for the tick.
        """
        if agent.mode in ("human", "idle"):
            return AgentIntent(
                agent_id=agent.agent_id,
                intent=self.steering.hold(),
                is_chaser=agent.is_chaser,
                mode=agent.mode,
                slot_index=agent.current_slot_index,
            )

        teammates = self._teammates(agent)
        if agent.mode in ("chase", "press") and ctx.ball_position is not None:
            intent = self.steering.toward(
                agent, ctx.ball_position, teammates, separate=agent.mode == "press"
            )
            return AgentIntent(
                agent_id=agent.agent_id,
                intent=intent,
                is_chaser=agent.is_chaser,
                mode=agent.mode,
                target=ctx.ball_position,
            )

        decision = self.assigner.assign(agent, ctx)
        return AgentIntent(
            agent_id=agent.agent_id,
            intent=self.steering.toward(agent, decision.target, teammates),
            is_chaser=agent.is_chaser,
            mode=agent.mode,
            target=decision.target,
            bank_type=decision.bank_type,
            slot_index=decision.slot_index,
        )

    def _teammates(self, agent: Agent) -> List[Agent]:
        """Return the agents ``agent`` should keep its distance from.

        Parameters
        ----------
        agent : Agent
            Agent being steered.

        Returns
        -------
        List[Agent]
            Same-side agents other than ``agent``, the human included.
        """
        return self.directory.teammates(agent)
