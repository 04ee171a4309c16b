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
"""Turn target positions into bounded movement intents.

The output is an input-style direction of at most unit length. Acceleration,
collision, and integration stay with the movement collaborator.
"""
from __future__ import annotations

from typing import Iterable, Optional

from sideline.engine.config import ENGINE_CONFIG, SteeringConfig
from sideline.engine.geometry import Vector2D, clamp01, inverse_lerp
from sideline.models.agent import Agent

ZERO = Vector2D(0.0, 0.0)


class IntentSteering:
    """Arrive-and-separate shaping for movement intents.

    Parameters
    ----------
    config : SteeringConfig | None, optional
        Radii and weights; defaults to ``ENGINE_CONFIG.steering``.
    """

    def __init__(self, config: Optional[SteeringConfig] = None) -> None:
        """Store the steering constants.

        Parameters
        ----------
        config : SteeringConfig | None, optional
            Radii and weights; defaults to ``ENGINE_CONFIG.steering``.
        """
        self.config = config if config is not None else ENGINE_CONFIG.steering

    @staticmethod
    def hold() -> Vector2D:
        """Return the explicit "stay put" intent.

        Returns
        -------
        Vector2D
            The zero vector.
        """
        return ZERO

    def toward(
        self,
        agent: Agent,
        target: Vector2D,
        teammates: Iterable[Agent] = (),
        *,
        separate: bool = True,
    ) -> Vector2D:
        """Return the intent that moves ``agent`` toward ``target``.

        Parameters
        ----------
        agent : Agent
            Agent being steered.
        target : Vector2D
            Destination.
        teammates : Iterable[Agent], optional
            Agents to keep apart from; ``agent`` itself is ignored.
        separate : bool, optional
            Blend in the separation push when ``True``.

        Returns
        -------
        Vector2D
            Zero inside the arrive radius, otherwise a direction whose length
            ramps up to 1 across the slow radius.
        """
        cfg = self.config
        offset = target - agent.position
        distance = offset.magnitude()

        direction = ZERO
        if distance > cfg.arrive_radius:
            direction = offset * (1.0 / max(distance, 1e-4))
            factor = inverse_lerp(cfg.arrive_radius, cfg.slow_radius, distance) if distance < cfg.slow_radius else 1.0
            direction = direction * clamp01(factor)

        if separate and cfg.separation_weight > 0 and cfg.separation_radius > 0:
            push = self.separation(agent, teammates)
            if not push.is_zero():
                combined = direction + push * cfg.separation_weight
                if not combined.is_zero():
                    direction = combined.normalize()
        return direction

    def separation(self, agent: Agent, teammates: Iterable[Agent]) -> Vector2D:
        """Return the summed push away from nearby teammates.

        Parameters
        ----------
        agent : Agent
            Agent being pushed.
        teammates : Iterable[Agent]
            Candidates; those outside ``separation_radius`` contribute nothing.

        Returns
        -------
        Vector2D
            Sum of unit pushes weighted by how deep each teammate intrudes.
        """
        radius = self.config.separation_radius
        push = ZERO
        for other in teammates:
            if other.agent_id == agent.agent_id:
                continue
            delta = agent.position - other.position
            distance = delta.magnitude()
            # Coincident agents have no direction to push along.
            if distance <= 1e-4 or distance > radius:
                continue
            weight = 1.0 - distance / radius
            push = push + delta * (weight / distance)
        return push
