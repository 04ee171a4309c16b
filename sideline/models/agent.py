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
"""Agent model shared by the chaser election and slot assignment."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Literal, Optional, Tuple

from sideline.engine.geometry import Vector2D

if TYPE_CHECKING:
    from sideline.models.formation import BankType, FormationBank

Side = Literal["home", "away"]
AgentMode = Literal["slot", "chase", "press", "human", "idle"]

SIDES: Tuple[Side, Side] = ("home", "away")


def validate_side(side: str) -> Side:
    """Return ``side`` unchanged when it names one of the two teams.

    Parameters
    ----------
    side : str
        Candidate side label.

    Returns
    -------
    Side
        The validated label.

    Raises
    ------
    ValueError
        When ``side`` is neither ``"home"`` nor ``"away"``.
    """
    if side not in SIDES:
        raise ValueError(f"Unknown side '{side}'. Known sides: {', '.join(SIDES)}")
    return side  # type: ignore[return-value]


@dataclass
class Agent:
    """A player on the pitch as seen by the assignment layer.

    Only ``current_slot_index``, ``last_assign_time``, ``is_chaser`` and
    ``mode`` are written by this package; position is owned by the movement
    collaborator and refreshed by the host before each tick.

    Parameters
    ----------
    agent_id : int
        Stable identifier; used for deterministic tie-breaking only.
    side : Side
        Team the agent plays for.
    position : Vector2D
        Current world position.
    default_slot : int, optional
        Preferred slot index (0 defence, 1 midfield, 2 attack).
    local_banks : Dict[BankType, FormationBank], optional
        Per-agent banks that override the shared catalog when complete.
    current_slot_index : int | None, optional
        Slot held after the previous tick, if any.
    last_assign_time : float, optional
        Clock value when ``current_slot_index`` last changed.
    is_chaser : bool, optional
        Whether the agent is its side's elected ball chaser.
    mode : AgentMode, optional
        What the agent is doing this tick.
    """

    agent_id: int
    side: Side
    position: Vector2D
    default_slot: int = 1
    local_banks: Dict["BankType", "FormationBank"] = field(default_factory=dict)
    current_slot_index: Optional[int] = None
    last_assign_time: float = -999.0
    is_chaser: bool = False
    mode: AgentMode = "slot"

    def __post_init__(self) -> None:
        """Validate the side label and default slot."""
        validate_side(self.side)
        if not 0 <= self.default_slot <= 2:
            raise ValueError("default_slot must be 0, 1 or 2")

    @property
    def seeks_slot(self) -> bool:
        """Return ``True`` while the agent competes for a formation slot."""
        return self.mode == "slot"

    def distance_to(self, point: Vector2D) -> float:
        """Return the distance from the agent to ``point``.

        Parameters
        ----------
        point : Vector2D
            World position to measure against.

        Returns
        -------
        float
            Euclidean distance.
        """
        return self.position.distance_to(point)

    def release_slot(self) -> None:
        """Drop any held slot without touching the assignment clock."""
        self.current_slot_index = None
