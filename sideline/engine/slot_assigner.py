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
"""Decentralised formation-slot selection.

Every AI agent runs :meth:`SlotAssigner.assign` for itself once per tick. The
agents never negotiate directly: each one reads its teammates' positions and
previous slots, picks the slot it believes it is best placed for, and then asks
the :class:`~sideline.engine.claims.SlotClaimRegistry` for it. The registry is
the only arbiter, so two agents that both believe they are closest cannot both
end up holding the same slot.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, AbstractSet, List, Literal, Optional, Set, Tuple

from sideline.engine.config import ENGINE_CONFIG, SlotAssignmentConfig
from sideline.engine.fallback import FallbackPositioner
from sideline.engine.geometry import Vector2D
from sideline.models.agent import Agent

if TYPE_CHECKING:
    from sideline.engine.context import TickContext
    from sideline.models.formation import BankType, FormationBank, FormationCatalog

DecisionSource = Literal["slot", "fallback"]


@dataclass(slots=True)
class SlotDecision:
    """Outcome of one agent's slot evaluation.

    Parameters
    ----------
    target : Vector2D
        Position the agent should steer toward.
    source : DecisionSource
        ``"slot"`` when a formation slot was claimed, ``"fallback"`` otherwise.
    bank_type : BankType | None, optional
        Bank context the decision was made in.
    slot_index : int | None, optional
        Claimed slot, ``None`` for fallback decisions.
    reserved_index : int | None, optional
        Slot reserved for the human teammate this tick, if any.
    denied : Tuple[int, ...], optional
        Slots the registry refused before the final choice.
    """

    target: Vector2D
    source: DecisionSource
    bank_type: Optional["BankType"] = None
    slot_index: Optional[int] = None
    reserved_index: Optional[int] = None
    denied: Tuple[int, ...] = ()

    @property
    def is_fallback(self) -> bool:
        """Return ``True`` when no formation slot backs the target."""
        return self.source == "fallback"


class SlotAssigner:
    """Choose and claim a formation slot for a single agent.

    Parameters
    ----------
    config : SlotAssignmentConfig | None, optional
        Radii, margins and timings; defaults to ``ENGINE_CONFIG.slots``.
    fallback : FallbackPositioner | None, optional
        Positioner used when no usable bank or free slot exists.
    """

    def __init__(
        self,
        config: Optional[SlotAssignmentConfig] = None,
        fallback: Optional[FallbackPositioner] = None,
    ) -> None:
        """Create an assigner.

        Parameters
        ----------
        config : SlotAssignmentConfig | None, optional
            Radii, margins and timings; defaults to ``ENGINE_CONFIG.slots``.
        fallback : FallbackPositioner | None, optional
            Positioner used when no slot can be claimed.
        """
        self.config = config if config is not None else ENGINE_CONFIG.slots
        self.fallback = fallback if fallback is not None else FallbackPositioner()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def assign(self, agent: Agent, ctx: "TickContext") -> SlotDecision:
        """Run the full slot decision for ``agent`` and update its bookkeeping.

        Parameters
        ----------
        agent : Agent
            AI agent in ``"slot"`` mode.
        ctx : TickContext
            Snapshot of the current tick.

        Returns
        -------
        SlotDecision
            Target and the slot that backs it, if any.
        """
        bank_type = ctx.possession.bank_type_for(agent.side)
        bank = self.resolve_bank(agent, bank_type, ctx.catalog)
        if bank is None:
            if ctx.debugger:
                ctx.debugger.log_fallback(ctx.now, agent.agent_id, agent.side, f"no complete {bank_type} bank")
            return self._fall_back(agent, ctx, bank_type)

        human = ctx.human_teammate(agent.side)
        reserved = self.human_reservation(bank, human)
        if reserved is not None and human is not None:
            # Authoritative: later AI claims on this index are denied.
            ctx.registry.try_claim(agent.side, bank_type, reserved, human.agent_id, tick_id=ctx.tick_id)

        rivals = self.rivals_for(agent, bank, bank_type, ctx)
        held = self.held_slots(agent, bank_type, ctx)
        occupied = self.occupied_slots(bank, rivals, human, reserved, held)
        chosen = self.choose_slot(agent, bank, occupied, rivals, human, ctx.now)

        denied: List[int] = []
        while chosen is not None and not ctx.registry.try_claim(
            agent.side, bank_type, chosen, agent.agent_id, tick_id=ctx.tick_id
        ):
            denied.append(chosen)
            if ctx.debugger:
                holder = ctx.registry.claimant(agent.side, bank_type, chosen)
                ctx.debugger.log_claim_denied(ctx.now, agent.agent_id, agent.side, bank_type, chosen, holder)
            chosen = self.search_free(agent, bank, occupied | set(denied), rivals, human)

        if chosen is None:
            if ctx.debugger:
                ctx.debugger.log_fallback(ctx.now, agent.agent_id, agent.side, f"no free {bank_type} slot")
            decision = self._fall_back(agent, ctx, bank_type)
            decision.reserved_index = reserved
            decision.denied = tuple(denied)
            return decision

        self._commit(agent, chosen, bank_type, ctx)
        anchor = bank.slot(chosen) or agent.position
        return SlotDecision(
            target=anchor + self.orbit_offset(agent, ctx.now),
            source="slot",
            bank_type=bank_type,
            slot_index=chosen,
            reserved_index=reserved,
            denied=tuple(denied),
        )

    # ------------------------------------------------------------------
    # Bank and occupancy
    # ------------------------------------------------------------------
    def resolve_bank(
        self,
        agent: Agent,
        bank_type: "BankType",
        catalog: "FormationCatalog",
    ) -> Optional["FormationBank"]:
        """Return the bank ``agent`` should use in ``bank_type`` context.

        Parameters
        ----------
        agent : Agent
            Agent whose local banks take priority.
        bank_type : BankType
            Possession context selected for the agent's side.
        catalog : FormationCatalog
            Shared team banks.

        Returns
        -------
        FormationBank | None
            The complete local bank, else the complete shared bank, else ``None``.
        """
        local = agent.local_banks.get(bank_type)
        if local is not None and local.is_complete:
            return local
        return catalog.complete_bank(agent.side, bank_type)

    def human_reservation(self, bank: "FormationBank", human: Optional[Agent]) -> Optional[int]:
        """Return the slot the human teammate is standing on, if any.

        Parameters
        ----------
        bank : FormationBank
            Bank being evaluated.
        human : Agent | None
            Human-controlled teammate, when present.

        Returns
        -------
        int | None
            Closest slot within ``claim_radius`` of the human.
        """
        if human is None:
            return None
        return bank.closest_slot_index(human.position, self.config.claim_radius)

    def rivals_for(
        self,
        agent: Agent,
        bank: "FormationBank",
        bank_type: "BankType",
        ctx: "TickContext",
    ) -> List[Agent]:
        """Return the AI teammates competing for slots in the same bank.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        bank : FormationBank
            Bank ``agent`` resolved.
        bank_type : BankType
            Context used to resolve each teammate's bank.
        ctx : TickContext
            Snapshot providing the directory and human agent.

        Returns
        -------
        List[Agent]
            Slot-seeking teammates, excluding the human, that resolve to
            the very same bank object.
        """
        rivals: List[Agent] = []
        for other in ctx.directory.teammates(agent):
            if ctx.is_human(other) or not other.seeks_slot:
                continue
            if self.resolve_bank(other, bank_type, ctx.catalog) is bank:
                rivals.append(other)
        return rivals

    def held_slots(self, agent: Agent, bank_type: "BankType", ctx: "TickContext") -> Set[int]:
        """Return the slot indices teammates hold in ``bank_type`` context.

        Holdings are matched by bank type rather than bank object, the same
        identity the claim registry keys on, so agents on separate local banks
        still respect each other's slots.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        bank_type : BankType
            Context shared by the whole side this tick.
        ctx : TickContext
            Snapshot providing the directory and human agent.

        Returns
        -------
        Set[int]
            ``current_slot_index`` of every slot-seeking AI teammate that has
            a usable bank of this type.
        """
        held: Set[int] = set()
        for other in ctx.directory.teammates(agent):
            if ctx.is_human(other) or not other.seeks_slot or other.current_slot_index is None:
                continue
            if self.resolve_bank(other, bank_type, ctx.catalog) is not None:
                held.add(other.current_slot_index)
        return held

    def occupied_slots(
        self,
        bank: "FormationBank",
        rivals: List[Agent],
        human: Optional[Agent],
        reserved: Optional[int],
        held: AbstractSet[int] = frozenset(),
    ) -> Set[int]:
        """Return the slot indices ``agent`` must not take this tick.

        Parameters
        ----------
        bank : FormationBank
            Bank being evaluated.
        rivals : List[Agent]
            Teammates sharing the bank, matched by proximity.
        human : Agent | None
            Human-controlled teammate, when present.
        reserved : int | None
            Slot already reserved for the human.
        held : AbstractSet[int], optional
            Indices teammates already hold, see :meth:`held_slots`.

        Returns
        -------
        Set[int]
            Indices occupied by proximity or held by a teammate.
        """
        radius = self.config.occupancy_radius
        occupied: Set[int] = {index for index in held if bank.slot(index) is not None}
        if reserved is not None:
            occupied.add(reserved)
        if human is not None:
            index = bank.closest_slot_index(human.position, radius)
            if index is not None:
                occupied.add(index)
        for other in rivals:
            index = bank.closest_slot_index(other.position, radius)
            if index is not None:
                occupied.add(index)
        return occupied

    # ------------------------------------------------------------------
    # Preference
    # ------------------------------------------------------------------
    def biased_distance(self, agent: Agent, point: Vector2D) -> float:
        """Return the distance from ``agent`` to ``point`` plus its id bias.

        Parameters
        ----------
        agent : Agent
            Agent being measured.
        point : Vector2D
            Slot position.

        Returns
        -------
        float
            Distance with a tiny id-derived offset so exact ties resolve the
            same way on every host.
        """
        cfg = self.config
        return agent.distance_to(point) + (agent.agent_id % cfg.tie_break_modulus) * cfg.tie_break_scale

    def is_closest(
        self,
        agent: Agent,
        bank: "FormationBank",
        index: int,
        rivals: List[Agent],
        human: Optional[Agent],
    ) -> bool:
        """Return whether no contender beats ``agent`` to a slot by the margin.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        bank : FormationBank
            Bank holding the slot.
        index : int
            Slot index.
        rivals : List[Agent]
            AI teammates sharing the bank.
        human : Agent | None
            Human teammate, who also contends.

        Returns
        -------
        bool
            ``False`` for empty slots, or when some contender is at least
            ``stickiness_gain`` nearer than ``agent``.
        """
        slot = bank.slot(index)
        if slot is None:
            return False
        threshold = self.biased_distance(agent, slot) - self.config.stickiness_gain
        contenders = rivals if human is None else [*rivals, human]
        for other in contenders:
            if other.agent_id == agent.agent_id:
                continue
            if self.biased_distance(other, slot) <= threshold:
                return False
        return True

    def choose_slot(
        self,
        agent: Agent,
        bank: "FormationBank",
        occupied: AbstractSet[int],
        rivals: List[Agent],
        human: Optional[Agent],
        now: float,
    ) -> Optional[int]:
        """Pick the slot ``agent`` will try to claim.

        Order of preference: the slot already held (while still closest or
        inside the reassignment cooldown), the default slot, the nearest free
        slot the agent is closest to, and finally the nearest free slot.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        bank : FormationBank
            Bank to choose from.
        occupied : AbstractSet[int]
            Indices that are not free.
        rivals : List[Agent]
            AI teammates sharing the bank.
        human : Agent | None
            Human teammate.
        now : float
            Clock value for the cooldown check.

        Returns
        -------
        int | None
            Chosen index, or ``None`` when every populated slot is occupied.
        """
        current = agent.current_slot_index
        if current is not None and self._is_free(bank, current, occupied):
            cooling = (now - agent.last_assign_time) < self.config.reassignment_cooldown
            if cooling or self.is_closest(agent, bank, current, rivals, human):
                return current

        default = agent.default_slot
        if self._is_free(bank, default, occupied) and self.is_closest(agent, bank, default, rivals, human):
            return default

        return self.search_free(agent, bank, occupied, rivals, human)

    def search_free(
        self,
        agent: Agent,
        bank: "FormationBank",
        excluded: AbstractSet[int],
        rivals: List[Agent],
        human: Optional[Agent],
    ) -> Optional[int]:
        """Return the nearest free slot, preferring those ``agent`` is closest to.

        Parameters
        ----------
        agent : Agent
            Agent being evaluated.
        bank : FormationBank
            Bank to search.
        excluded : AbstractSet[int]
            Indices to skip (occupied or already denied).
        rivals : List[Agent]
            AI teammates sharing the bank.
        human : Agent | None
            Human teammate.

        Returns
        -------
        int | None
            Best index, or ``None`` when nothing is left.
        """
        free = [(index, slot) for index, slot in bank.populated() if index not in excluded]
        if not free:
            return None
        preferred = [item for item in free if self.is_closest(agent, bank, item[0], rivals, human)]
        pool = preferred or free
        best_index, _ = min(pool, key=lambda item: (self.biased_distance(agent, item[1]), item[0]))
        return best_index

    def orbit_offset(self, agent: Agent, now: float) -> Vector2D:
        """Return the small circular drift applied around a held slot.

        Parameters
        ----------
        agent : Agent
            Agent whose id seeds the phase.
        now : float
            Clock value driving the rotation.

        Returns
        -------
        Vector2D
            Offset of length ``orbit_radius``; zero when the radius is not positive.
        """
        cfg = self.config
        if cfg.orbit_radius <= 0:
            return Vector2D(0.0, 0.0)
        angle = math.radians(agent.agent_id % 360) + now * cfg.orbit_speed
        return Vector2D(math.cos(angle) * cfg.orbit_radius, math.sin(angle) * cfg.orbit_radius)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _is_free(self, bank: "FormationBank", index: int, occupied: AbstractSet[int]) -> bool:
        """Return whether ``index`` names a populated, unoccupied slot.

        Parameters
        ----------
        bank : FormationBank
            Bank being evaluated.
        index : int
            Slot index.
        occupied : AbstractSet[int]
            Indices that are not free.

        Returns
        -------
        bool
            ``True`` when the slot exists and nobody occupies it.
        """
        return index not in occupied and bank.slot(index) is not None

    def _commit(self, agent: Agent, index: int, bank_type: "BankType", ctx: "TickContext") -> None:
        """Store the claimed slot and restart the cooldown when it changed.

        Parameters
        ----------
        agent : Agent
            Agent that won the claim.
        index : int
            Claimed slot.
        bank_type : BankType
            Context of the claim, for telemetry.
        ctx : TickContext
            Snapshot providing the clock and debugger.
        """
        previous = agent.current_slot_index
        if previous == index:
            return
        agent.current_slot_index = index
        agent.last_assign_time = ctx.now
        if ctx.debugger:
            ctx.debugger.log_assignment(ctx.now, agent.agent_id, agent.side, bank_type, previous, index)

    def _fall_back(self, agent: Agent, ctx: "TickContext", bank_type: "BankType") -> SlotDecision:
        """Release any held slot and return the formula-based target.

        Parameters
        ----------
        agent : Agent
            Agent without a claimable slot.
        ctx : TickContext
            Snapshot handed to the fallback positioner.
        bank_type : BankType
            Context the agent was evaluated in.

        Returns
        -------
        SlotDecision
            Fallback decision.
        """
        agent.release_slot()
        return SlotDecision(
            target=self.fallback.target_for(agent, ctx),
            source="fallback",
            bank_type=bank_type,
        )
