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
"""Tests for per-agent slot selection and claiming."""

from typing import Iterable, List, Optional

import pytest

from sideline.engine.claims import SlotClaimRegistry
from sideline.engine.config import SlotAssignmentConfig
from sideline.engine.context import TickContext
from sideline.engine.directory import AgentDirectory
from sideline.engine.geometry import Vector2D
from sideline.engine.possession import PossessionResolver
from sideline.engine.slot_assigner import SlotAssigner
from sideline.models.agent import Agent
from sideline.models.formation import FormationBank, FormationCatalog

POINTS = [(-6.0, 0.0), (0.0, 0.0), (6.0, 0.0)]


def _agent(agent_id: int, x: float, y: float = 0.0, default_slot: int = 1, **kwargs) -> Agent:
    return Agent(agent_id=agent_id, side="home", position=Vector2D(x, y), default_slot=default_slot, **kwargs)


def _catalog(points: Optional[List] = None) -> FormationCatalog:
    catalog = FormationCatalog()
    catalog.set_bank("home", FormationBank.from_points("neutral", points if points is not None else POINTS))
    return catalog


class World:
    """Minimal tick driver that hands out fresh contexts for the same agents."""

    def __init__(
        self,
        agents: Iterable[Agent],
        catalog: Optional[FormationCatalog] = None,
        human: Optional[Agent] = None,
    ) -> None:
        self.directory = AgentDirectory()
        for agent in agents:
            self.directory.register(agent)
        if human is not None:
            human.mode = "human"
            self.directory.register(human)
        self.catalog = catalog if catalog is not None else _catalog()
        self.human = human
        self.registry = SlotClaimRegistry()
        self.possession = PossessionResolver()
        self.tick_id = 0

    def context(self, now: float = 0.0) -> TickContext:
        self.tick_id += 1
        self.possession.observe(None, now)
        return TickContext(
            tick_id=self.tick_id,
            now=now,
            possession=self.possession,
            catalog=self.catalog,
            directory=self.directory,
            registry=self.registry,
            human=self.human,
            ball_position=Vector2D(0.0, 10.0),
        )


@pytest.fixture
def assigner() -> SlotAssigner:
    """Assigner without the cosmetic orbit so targets equal slot positions."""
    return SlotAssigner(SlotAssignmentConfig(orbit_radius=0.0))


class TestSlotSelection:
    """Tests for the happy-path slot decision."""

    def test_lone_agent_takes_default_slot(self, assigner: SlotAssigner) -> None:
        """An uncontested agent claims its default slot and records the time."""
        agent = _agent(1, 0.5)
        world = World([agent])
        ctx = world.context(now=3.0)
        decision = assigner.assign(agent, ctx)
        assert decision.source == "slot"
        assert decision.slot_index == 1
        assert decision.bank_type == "neutral"
        assert decision.target == Vector2D(0.0, 0.0)
        assert agent.current_slot_index == 1
        assert agent.last_assign_time == 3.0
        assert world.registry.claimant("home", "neutral", 1) == 1

    def test_agents_spread_over_distinct_slots(self, assigner: SlotAssigner) -> None:
        """Agents sharing a default slot still end up on distinct slots."""
        agents = [_agent(1, -5.0), _agent(2, 0.2), _agent(3, 5.0)]
        world = World(agents)
        ctx = world.context()
        indices = [assigner.assign(agent, ctx).slot_index for agent in agents]
        assert indices == [0, 1, 2]

    def test_busy_default_falls_to_best_free_slot(self, assigner: SlotAssigner) -> None:
        """With the default slot occupied the agent takes the free slot it is closest to."""
        holder = _agent(1, 0.1)
        agent = _agent(2, 4.0)
        world = World([holder, agent])
        ctx = world.context()
        assigner.assign(holder, ctx)
        assert assigner.assign(agent, ctx).slot_index == 2

    def test_partial_local_bank_uses_shared_bank(self, assigner: SlotAssigner) -> None:
        """Incomplete local banks are ignored in favour of the catalog."""
        local = FormationBank.from_points("neutral", [(1.0, 1.0), None, (2.0, 2.0)])
        agent = _agent(1, 0.0, local_banks={"neutral": local})
        decision = assigner.assign(agent, World([agent]).context())
        assert decision.target == Vector2D(0.0, 0.0)

    def test_complete_local_bank_overrides_shared(self, assigner: SlotAssigner) -> None:
        """A complete local bank wins over the catalog."""
        local = FormationBank.from_points("neutral", [(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)])
        agent = _agent(1, 2.0, 2.0, local_banks={"neutral": local})
        decision = assigner.assign(agent, World([agent]).context())
        assert decision.slot_index == 1
        assert decision.target == Vector2D(2.0, 2.0)

    def test_orbit_offset_circles_the_slot(self) -> None:
        """The cosmetic orbit keeps the target at orbit_radius from the slot."""
        assigner = SlotAssigner(SlotAssignmentConfig(orbit_radius=0.18))
        agent = _agent(1, 0.0)
        decision = assigner.assign(agent, World([agent]).context(now=1.7))
        assert decision.target.distance_to(Vector2D(0.0, 0.0)) == pytest.approx(0.18)

    def test_biased_distance(self, assigner: SlotAssigner) -> None:
        """The id bias wraps at the configured modulus."""
        point = Vector2D(0.0, 0.0)
        assert assigner.biased_distance(_agent(998, 1.0), point) == 1.0 + 1e-6
        assert assigner.biased_distance(_agent(997, 1.0), point) == 1.0


class TestMutualExclusion:
    """Tests for registry arbitration."""

    def test_claim_taken_earlier_in_tick_is_denied_and_replanned(self, assigner: SlotAssigner) -> None:
        """A slot already claimed this tick is denied and the agent replans to the next free slot."""
        agent = _agent(1, -0.1)
        world = World([agent])
        ctx = world.context()
        world.registry.try_claim("home", "neutral", 1, claimant_id=7, tick_id=ctx.tick_id)

        decision = assigner.assign(agent, ctx)

        assert decision.slot_index == 0
        assert decision.denied == (1,)
        assert world.registry.claimant("home", "neutral", 1) == 7
        assert world.registry.claimant("home", "neutral", 0) == 1

    def test_separate_local_banks_see_each_others_slots(self, assigner: SlotAssigner) -> None:
        """Agents on distinct banks of the same type avoid a slot a teammate took earlier in the tick."""
        first = _agent(1, 0.1, local_banks={"neutral": FormationBank.from_points("neutral", POINTS)})
        second = _agent(2, -0.1, local_banks={"neutral": FormationBank.from_points("neutral", POINTS)})
        world = World([first, second])
        ctx = world.context()

        won = assigner.assign(first, ctx)
        other = assigner.assign(second, ctx)

        assert won.slot_index == 1
        assert other.slot_index == 0
        assert other.denied == ()

    def test_every_slot_denied_falls_back(self, assigner: SlotAssigner) -> None:
        """When the registry refuses every slot the agent uses the fallback target."""
        agent = _agent(1, 0.0)
        world = World([agent])
        ctx = world.context()
        for index in range(3):
            world.registry.try_claim("home", "neutral", index, claimant_id=50 + index, tick_id=ctx.tick_id)
        agent.current_slot_index = 2
        decision = assigner.assign(agent, ctx)
        assert decision.is_fallback
        assert decision.denied == (2, 1, 0)
        assert agent.current_slot_index is None

    def test_all_slots_occupied_falls_back(self, assigner: SlotAssigner) -> None:
        """Agents standing on every slot leave nothing for a fourth."""
        sitters = [_agent(1, -6.0, default_slot=0), _agent(2, 0.0), _agent(3, 6.0, default_slot=2)]
        extra = _agent(4, 0.0, 3.0)
        world = World(sitters + [extra])
        ctx = world.context()
        for agent in sitters:
            assigner.assign(agent, ctx)
        decision = assigner.assign(extra, ctx)
        assert decision.is_fallback
        assert decision.target is not None


class TestHumanPriority:
    """Tests for the human reservation."""

    def test_human_slot_is_never_taken(self, assigner: SlotAssigner) -> None:
        """An AI agent closer to the slot still yields it to the human within claim_radius."""
        human = _agent(9, 0.3)
        agent = _agent(1, 0.1)
        world = World([agent], human=human)
        decision = assigner.assign(agent, world.context())
        assert decision.reserved_index == 1
        assert decision.slot_index == 0
        assert world.registry.claimant("home", "neutral", 1) == 9

    def test_human_outside_claim_radius_reserves_nothing(self, assigner: SlotAssigner) -> None:
        """A human away from every slot does not block anything."""
        human = _agent(9, 0.0, 2.0)
        agent = _agent(1, 0.1)
        decision = assigner.assign(agent, World([agent], human=human).context())
        assert decision.reserved_index is None
        assert decision.slot_index == 1

    def test_human_on_other_side_is_ignored(self, assigner: SlotAssigner) -> None:
        """Reservations only apply to the human's own side."""
        human = Agent(agent_id=9, side="away", position=Vector2D(0.0, 0.0))
        agent = _agent(1, 0.1)
        decision = assigner.assign(agent, World([agent], human=human).context())
        assert decision.slot_index == 1


class TestStickiness:
    """Tests for stability and hysteresis."""

    def test_assignment_stable_when_nothing_moves(self, assigner: SlotAssigner) -> None:
        """Repeated ticks leave assignments and their timestamps untouched."""
        agents = [_agent(1, 0.3), _agent(2, -5.5, default_slot=0), _agent(3, 5.0, default_slot=2)]
        world = World(agents)
        ctx = world.context(now=0.0)
        first = [assigner.assign(agent, ctx).slot_index for agent in agents]
        for now in (0.5, 1.0, 5.0):
            ctx = world.context(now=now)
            assert [assigner.assign(agent, ctx).slot_index for agent in agents] == first
        assert [agent.last_assign_time for agent in agents] == [0.0, 0.0, 0.0]

    def test_marginally_closer_rival_does_not_steal(self, assigner: SlotAssigner) -> None:
        """A rival closer by less than stickiness_gain leaves the holder in place."""
        holder = _agent(1, 1.0, current_slot_index=1, last_assign_time=0.0)
        rival = _agent(2, -0.9)
        world = World([rival, holder])
        ctx = world.context(now=10.0)
        rival_decision = assigner.assign(rival, ctx)
        holder_decision = assigner.assign(holder, ctx)
        assert holder_decision.slot_index == 1
        assert rival_decision.slot_index == 0
        assert holder.last_assign_time == 0.0

    def test_cooldown_protects_fresh_assignment(self, assigner: SlotAssigner) -> None:
        """Inside the cooldown the holder keeps its slot even against a much closer rival."""
        holder = _agent(1, 1.0, current_slot_index=1, last_assign_time=0.0)
        rival = _agent(2, 0.5)
        ctx = World([holder, rival]).context(now=0.1)
        assert assigner.assign(holder, ctx).slot_index == 1

    def test_cooldown_holds_across_separate_local_banks(self) -> None:
        """A teammate on its own copy of the bank cannot take a slot still cooling down."""
        assigner = SlotAssigner(SlotAssignmentConfig(orbit_radius=0.0, reassignment_cooldown=5.0))
        holder = _agent(
            1,
            0.6,
            current_slot_index=1,
            last_assign_time=0.0,
            local_banks={"neutral": FormationBank.from_points("neutral", POINTS)},
        )
        rival = _agent(2, -0.5, local_banks={"neutral": FormationBank.from_points("neutral", POINTS)})
        world = World([rival, holder])
        ctx = world.context(now=0.1)

        rival_decision = assigner.assign(rival, ctx)
        holder_decision = assigner.assign(holder, ctx)

        assert rival_decision.slot_index == 0
        assert holder_decision.slot_index == 1
        assert holder.last_assign_time == 0.0
        assert world.registry.claimant("home", "neutral", 1) == 1

    def test_clearly_closer_rival_wins_after_cooldown(self, assigner: SlotAssigner) -> None:
        """After the cooldown a rival closer by the margin takes the slot on the same tick."""
        holder = _agent(1, 1.0, current_slot_index=1, last_assign_time=0.0)
        rival = _agent(2, 0.5)
        world = World([holder, rival])
        ctx = world.context(now=10.0)
        assert assigner.assign(holder, ctx).slot_index == 2
        assert holder.last_assign_time == 10.0
        assert assigner.assign(rival, ctx).slot_index == 1


class TestFallback:
    """Tests for missing formation data."""

    def test_no_banks_falls_back(self, assigner: SlotAssigner) -> None:
        """An empty catalog yields a fallback target instead of an error."""
        agent = _agent(1, 0.0, current_slot_index=1)
        decision = assigner.assign(agent, World([agent], catalog=FormationCatalog()).context())
        assert decision.is_fallback
        assert isinstance(decision.target, Vector2D)
        assert decision.slot_index is None
        assert agent.current_slot_index is None

    def test_partial_shared_bank_falls_back(self, assigner: SlotAssigner) -> None:
        """A shared bank with a missing slot is unusable."""
        agent = _agent(1, 0.0)
        catalog = _catalog([POINTS[0], None, POINTS[2]])
        assert assigner.assign(agent, World([agent], catalog=catalog).context()).is_fallback
