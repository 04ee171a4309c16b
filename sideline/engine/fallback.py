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
"""Formulaic positioning for agents without usable formation data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sideline.engine.config import ENGINE_CONFIG, FallbackConfig
from sideline.engine.geometry import ORIGIN, Vector2D

if TYPE_CHECKING:
    from sideline.engine.context import TickContext
    from sideline.models.agent import Agent, Side


class FallbackPositioner:
    """Place an agent relative to the ball along its side's goal axis.

    Parameters
    ----------
    config : FallbackConfig | None, optional
        Offsets and blend factors; defaults to ``ENGINE_CONFIG.fallback``.
    """

    def __init__(self, config: Optional[FallbackConfig] = None) -> None:
        """Store the positioning constants.

        Parameters
        ----------
        config : FallbackConfig | None, optional
            Offsets and blend factors; defaults to ``ENGINE_CONFIG.fallback``.
        """
        self.config = config if config is not None else ENGINE_CONFIG.fallback

    def target_for(self, agent: "Agent", ctx: "TickContext") -> Vector2D:
        """Return the fallback target for ``agent`` this tick.

        Parameters
        ----------
        agent : Agent
            Agent that has no bank to work from.
        ctx : TickContext
            Tick snapshot providing possession and the ball position.

        Returns
        -------
        Vector2D
            Target position; uses the agent's own position when the ball is unknown.
        """
        ball = ctx.ball_position if ctx.ball_position is not None else agent.position
        return self.position_for(
            agent.side,
            agent.default_slot,
            ball,
            attacking=ctx.possession.effective_attacking(agent.side),
            have_owner=ctx.possession.have_owner(),
        )

    def role_offset(self, side: "Side", role_index: int) -> Vector2D:
        """Return the static offset for a role, mirrored to ``side``.

        Parameters
        ----------
        side : Side
            Team whose goal axis orients the offset.
        role_index : int
            Role slot; clamped into the configured range.

        Returns
        -------
        Vector2D
            Offset relative to the formula's anchor point.
        """
        offsets = self.config.slot_offsets
        index = max(0, min(len(offsets) - 1, role_index))
        dx, dy = offsets[index]
        return Vector2D(dx * self.goal_axis(side), dy)

    def goal_axis(self, side: "Side") -> float:
        """Return the attacking direction along ``x`` for ``side``.

        Parameters
        ----------
        side : Side
            Team being oriented.

        Returns
        -------
        float
            ``1.0`` or ``-1.0``; unknown sides attack toward positive ``x``.
        """
        return self.config.goal_axis.get(side, 1.0)

    def position_for(
        self,
        side: "Side",
        role_index: int,
        ball: Vector2D,
        *,
        attacking: bool,
        have_owner: bool,
    ) -> Vector2D:
        """Compute the fallback target from plain inputs.

        Parameters
        ----------
        side : Side
            Team of the agent.
        role_index : int
            Role slot selecting the static offset.
        ball : Vector2D
            Ball position used as the anchor.
        attacking : bool
            Whether ``side`` is effectively attacking.
        have_owner : bool
            Whether anybody holds the ball.

        Returns
        -------
        Vector2D
            Target position.
        """
        cfg = self.config
        offset = self.role_offset(side, role_index)
        axis = self.goal_axis(side)

        if not have_owner:
            return ball.lerp(ORIGIN, cfg.neutral_centre_pull) + offset
        if attacking:
            return ball + Vector2D(axis * cfg.attack_lead, 0.0) + offset

        own_goal = ball - Vector2D(axis * cfg.defend_goal_depth, 0.0)
        return ball.lerp(own_goal, cfg.defend_blend) + offset * cfg.defend_offset_scale
