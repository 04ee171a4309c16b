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
"""Central configuration for assignment tuning parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(slots=True)
class PossessionConfig:
    """Timing that decides which side counts as attacking.

    Parameters
    ----------
    grace_period : float, default=2.0
        Seconds a side keeps its attacking shape after the ball becomes loose.
    """

    grace_period: float = 2.0


@dataclass(slots=True)
class ChaserConfig:
    """Ball-chaser election cadence and pressing range.

    Parameters
    ----------
    reassign_interval : float, default=0.5
        Seconds between chaser elections for a side.
    press_radius : float, default=1.0
        Non-chasers within this distance of the ball converge on it too.
    """

    reassign_interval: float = 0.5
    press_radius: float = 1.0


@dataclass(slots=True)
class SlotAssignmentConfig:
    """Radii, hysteresis, and tie-break constants for formation slots.

    Parameters
    ----------
    claim_radius : float, default=0.8
        A human within this distance of a slot reserves it.
    occupancy_radius : float, default=0.45
        A teammate within this distance of a slot marks it occupied.
    stickiness_gain : float, default=0.15
        Minimum distance advantage a rival needs to out-rank a claimant.
    reassignment_cooldown : float, default=0.35
        Seconds an agent keeps a fresh assignment regardless of rivals.
    orbit_radius : float, default=0.18
        Radius of the cosmetic orbit around the slot position.
    orbit_speed : float, default=0.35
        Angular speed of the orbit in radians per second.
    tie_break_modulus : int, default=997
        Modulus applied to the agent id when deriving the tie-break bias.
    tie_break_scale : float, default=1e-6
        Scale applied to the reduced id; keeps the bias far below any real gap.
    """

    claim_radius: float = 0.8
    occupancy_radius: float = 0.45
    stickiness_gain: float = 0.15
    reassignment_cooldown: float = 0.35
    orbit_radius: float = 0.18
    orbit_speed: float = 0.35
    tie_break_modulus: int = 997
    tie_break_scale: float = 1e-6


@dataclass(slots=True)
class SteeringConfig:
    """Shaping applied when a target is turned into a movement intent.

    Parameters
    ----------
    arrive_radius : float, default=0.15
        Distance under which the intent drops to zero.
    slow_radius : float, default=1.2
        Distance under which the intent is scaled down linearly.
    separation_radius : float, default=0.9
        Teammates closer than this push the agent away.
    separation_weight : float, default=0.6
        Weight of the separation push; 0 disables it.
    """

    arrive_radius: float = 0.15
    slow_radius: float = 1.2
    separation_radius: float = 0.9
    separation_weight: float = 0.6


@dataclass(slots=True)
class FallbackConfig:
    """Formulaic positioning used when no formation bank is available.

    Parameters
    ----------
    slot_offsets : Tuple[Tuple[float, float], ...]
        Per-role offsets (defence, midfield, attack) expressed for a side
        attacking toward positive ``x``.
    attack_lead : float, default=1.8
        Distance ahead of the ball held while attacking.
    defend_goal_depth : float, default=10.0
        Distance behind the ball used to approximate the own goal.
    defend_blend : float, default=0.35
        Fraction of the way from the ball toward the own goal when defending.
    defend_offset_scale : float, default=0.6
        Compression applied to the role offsets while defending.
    neutral_centre_pull : float, default=0.3
        Fraction of the way from the ball toward the pitch centre on a loose ball.
    goal_axis : Dict[str, float]
        Attacking direction along ``x`` for each side.
    """

    slot_offsets: Tuple[Tuple[float, float], ...] = ((-1.5, -0.6), (0.0, 0.0), (1.5, 0.6))
    attack_lead: float = 1.8
    defend_goal_depth: float = 10.0
    defend_blend: float = 0.35
    defend_offset_scale: float = 0.6
    neutral_centre_pull: float = 0.3
    goal_axis: Dict[str, float] = field(default_factory=lambda: {"home": 1.0, "away": -1.0})


@dataclass(slots=True)
class SimulationConfig:
    """Timing for the headless demo driver.

    Parameters
    ----------
    tick_dt : float, default=0.02
        Fixed timestep between ticks in seconds.
    demo_duration : float, default=6.0
        Simulated seconds the demo scenario runs for.
    demo_agent_speed : float, default=5.0
        Speed used by the demo to integrate intents into positions.
    """

    tick_dt: float = 0.02
    demo_duration: float = 6.0
    demo_agent_speed: float = 5.0


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all tuning structures.

    Parameters
    ----------
    possession : PossessionConfig, default=PossessionConfig()
        Possession grace timing.
    chaser : ChaserConfig, default=ChaserConfig()
        Chaser election settings.
    slots : SlotAssignmentConfig, default=SlotAssignmentConfig()
        Formation slot assignment settings.
    steering : SteeringConfig, default=SteeringConfig()
        Intent shaping settings.
    fallback : FallbackConfig, default=FallbackConfig()
        Bankless positioning settings.
    simulation : SimulationConfig, default=SimulationConfig()
        Demo driver timing.
    """

    possession: PossessionConfig = field(default_factory=PossessionConfig)
    chaser: ChaserConfig = field(default_factory=ChaserConfig)
    slots: SlotAssignmentConfig = field(default_factory=SlotAssignmentConfig)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""
