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
"""Entry point for a headless, scripted assignment demo."""
import argparse
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from sideline.engine.config import ENGINE_CONFIG
from sideline.engine.geometry import Vector2D
from sideline.engine.tick import AgentIntent, SquadCoordinator
from sideline.models.agent import SIDES, Agent
from sideline.models.formation import FormationCatalog
from sideline.utils.debug import AssignmentDebugger
from sideline.utils.formations import load_setup_from_json


def generate_agents(per_side: int = 3) -> List[Agent]:
    """Create a small default squad for each side.

    Parameters
    ----------
    per_side : int
        Number of agents per side; default slots cycle through 0, 1 and 2.

    Returns
    -------
    List[Agent]
        Home agents numbered from 1, away agents from 11.
    """
    agents: List[Agent] = []
    for side, first_id, direction in (("home", 1, -1.0), ("away", 11, 1.0)):
        for i in range(per_side):
            slot = i % 3
            position = Vector2D(direction * (8.0 - 3.0 * slot), 2.0 * (i - 1))
            agents.append(Agent(agent_id=first_id + i, side=side, position=position, default_slot=slot))
    return agents


def scripted_ball(
    now: float, duration: float, agents: Sequence[Agent]
) -> Tuple[Optional[Agent], Vector2D]:
    """Return the ball owner and position for the demo script.

    The home side holds the ball for the first third, the ball runs loose in
    the middle third and the away side holds it for the rest.

    Parameters
    ----------
    now : float
        Demo clock in seconds.
    duration : float
        Total demo length in seconds.
    agents : Sequence[Agent]
        Registered agents.

    Returns
    -------
    tuple[Agent | None, Vector2D]
        Owner (``None`` while loose) and ball position.
    """
    phase = now / duration if duration > 0 else 1.0
    ball = Vector2D(-4.0 + 8.0 * phase, 0.5)
    if phase < 1.0 / 3.0:
        side = "home"
    elif phase < 2.0 / 3.0:
        return None, ball
    else:
        side = "away"
    team = [agent for agent in agents if agent.side == side]
    if not team:
        return None, ball
    owner = min(team, key=lambda a: (a.distance_to(ball), a.agent_id))
    return owner, owner.position


def integrate(agents: Sequence[Agent], intents: dict, dt: float, speed: float) -> None:
    """Move agents along their intents with a constant top speed.

    Parameters
    ----------
    agents : Sequence[Agent]
        Agents to move.
    intents : dict
        Mapping of agent id to :class:`AgentIntent`.
    dt : float
        Tick length in seconds.
    speed : float
        Speed in metres per second for a unit intent.
    """
    for agent in agents:
        result: Optional[AgentIntent] = intents.get(agent.agent_id)
        if result is None:
            continue
        agent.position = agent.position + result.intent * (speed * dt)


def print_status(now: float, coordinator: SquadCoordinator, intents: dict) -> None:
    """Print a one-line summary per side.

    Parameters
    ----------
    now : float
        Demo clock in seconds.
    coordinator : SquadCoordinator
        Running coordinator.
    intents : dict
        Latest intents keyed by agent id.
    """
    print(f"\nTime: {now:4.1f}s | Possession: {coordinator.possession.describe()}")
    for side in SIDES:
        parts = []
        for agent in coordinator.directory.team(side):
            result = intents[agent.agent_id]
            slot = "-" if result.slot_index is None else str(result.slot_index)
            parts.append(f"#{agent.agent_id} {result.mode}:{slot}")
        print(f"  {side}: " + ", ".join(parts))


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the scripted demo.

    Parameters
    ----------
    argv : Sequence[str] | None
        Command-line arguments; ``None`` reads ``sys.argv``.
    """
    sim = ENGINE_CONFIG.simulation
    parser = argparse.ArgumentParser(description="Headless formation-slot assignment demo")
    parser.add_argument("--formations", default="data/formations.json", help="Formation and roster JSON file")
    parser.add_argument("--duration", type=float, default=sim.demo_duration, help="Demo length in seconds")
    parser.add_argument("--human", type=int, default=None, help="Agent id to treat as human-controlled")
    parser.add_argument("--debug-dir", default=None, help="Write an assignment log to this directory")
    args = parser.parse_args(argv)

    debugger = AssignmentDebugger(args.debug_dir) if args.debug_dir else None
    formations_file = Path(args.formations)
    if formations_file.exists():
        try:
            catalog, agents = load_setup_from_json(str(formations_file))
        except (KeyError, ValueError) as e:
            print(f"Error loading formations from {formations_file}: {e}")
            print("Falling back to generated agents without formations...")
            if debugger:
                debugger.log_error("FORMATIONS", f"{formations_file}: {e}")
            catalog, agents = FormationCatalog(), generate_agents()
    else:
        print(f"No formations file found at {formations_file}")
        print("Using generated agents without formations...")
        catalog, agents = FormationCatalog(), generate_agents()
    if not agents:
        agents = generate_agents()

    coordinator = SquadCoordinator(catalog, debugger=debugger)
    coordinator.add_agents(agents)
    human = coordinator.directory.get(args.human) if args.human is not None else None

    steps = max(1, int(args.duration / sim.tick_dt))
    last_second = -1
    intents: dict = {}
    try:
        for step in range(steps):
            now = step * sim.tick_dt
            owner, ball = scripted_ball(now, args.duration, agents)
            intents = coordinator.step(now, owner, ball, human=human)
            integrate(agents, intents, sim.tick_dt, sim.demo_agent_speed)
            if int(now) != last_second:
                last_second = int(now)
                print_status(now, coordinator, intents)
    finally:
        if debugger:
            print(f"\nAssignment log written to {debugger.log_path}")
            debugger.close()


if __name__ == "__main__":
    main()
