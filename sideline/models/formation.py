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
"""Formation bank and catalog domain models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Literal, Optional, Sequence, Tuple

from sideline.engine.geometry import Vector2D
from sideline.models.agent import Side, validate_side

BankType = Literal["attack", "defend", "neutral"]

BANK_TYPES: Tuple[BankType, BankType, BankType] = ("attack", "defend", "neutral")
SLOTS_PER_BANK = 3


@dataclass(frozen=True)
class FormationBank:
    """Three ordered target positions for one side in one possession context.

    Unpopulated slots are stored as ``None``; a bank with fewer than three
    populated slots is kept around but treated as unavailable by the
    assignment layer.

    Parameters
    ----------
    bank_type : BankType
        Possession context the bank belongs to.
    slots : Tuple[Vector2D | None, ...]
        Slot positions ordered by index (0 defence, 1 midfield, 2 attack).
    """

    bank_type: BankType
    slots: Tuple[Optional[Vector2D], ...] = ()

    def __post_init__(self) -> None:
        """Reject unknown bank types and banks with more than three slots."""
        if self.bank_type not in BANK_TYPES:
            raise ValueError(f"Unknown bank type '{self.bank_type}'")
        if len(self.slots) > SLOTS_PER_BANK:
            raise ValueError(f"Formation bank holds at most {SLOTS_PER_BANK} slots")

    @classmethod
    def from_points(cls, bank_type: BankType, points: Sequence[Optional[Tuple[float, float]]]) -> "FormationBank":
        """Build a bank from plain ``(x, y)`` pairs.

        Parameters
        ----------
        bank_type : BankType
            Possession context of the new bank.
        points : Sequence[tuple[float, float] | None]
            Slot coordinates in index order; ``None`` marks an empty slot.

        Returns
        -------
        FormationBank
            Bank wrapping the converted positions.
        """
        slots = tuple(None if p is None else Vector2D(float(p[0]), float(p[1])) for p in points)
        return cls(bank_type, slots)

    @property
    def is_complete(self) -> bool:
        """Return ``True`` when all three slots are populated."""
        return len(self.slots) == SLOTS_PER_BANK and all(slot is not None for slot in self.slots)

    def __len__(self) -> int:
        """Return the number of slot entries, populated or not."""
        return len(self.slots)

    def slot(self, index: int) -> Optional[Vector2D]:
        """Return the position of slot ``index`` if it exists.

        Parameters
        ----------
        index : int
            Slot index to look up.

        Returns
        -------
        Vector2D | None
            Slot position, or ``None`` for an out-of-range or empty slot.
        """
        if 0 <= index < len(self.slots):
            return self.slots[index]
        return None

    def populated(self) -> Iterator[Tuple[int, Vector2D]]:
        """Iterate over ``(index, position)`` for every populated slot.

        Returns
        -------
        Iterator[tuple[int, Vector2D]]
            Populated slots in index order.
        """
        for index, position in enumerate(self.slots):
            if position is not None:
                yield index, position

    def closest_slot_index(self, position: Vector2D, max_radius: float) -> Optional[int]:
        """Return the slot nearest to ``position`` within ``max_radius``.

        Exact distance ties intentionally go to the lowest index, so a later
        slot at the same distance never displaces an earlier one. A scan that
        keeps the last of several equal slots would pick the highest index
        instead; callers rely on the lowest-index rule.

        Parameters
        ----------
        position : Vector2D
            Point to test against the bank.
        max_radius : float
            Inclusive search radius.

        Returns
        -------
        int | None
            Index of the nearest slot in range; the lowest index wins exact ties.
        """
        best_index: Optional[int] = None
        best_distance = max_radius
        for index, slot_position in self.populated():
            distance = slot_position.distance_to(position)
            if distance < best_distance or (best_index is None and distance <= best_distance):
                best_index = index
                best_distance = distance
        return best_index


@dataclass
class FormationCatalog:
    """Shared team-wide banks keyed by side and possession context.

    Parameters
    ----------
    banks : Dict[tuple[Side, BankType], FormationBank], optional
        Initial bank mapping.
    """

    banks: Dict[Tuple[Side, BankType], FormationBank] = field(default_factory=dict)

    def set_bank(self, side: Side, bank: FormationBank) -> None:
        """Store ``bank`` as the shared bank for ``side`` and its context.

        Parameters
        ----------
        side : Side
            Team owning the bank.
        bank : FormationBank
            Bank to store; replaces any existing entry.
        """
        self.banks[(validate_side(side), bank.bank_type)] = bank

    def get(self, side: Side, bank_type: BankType) -> Optional[FormationBank]:
        """Return the shared bank for ``side`` and ``bank_type``.

        Parameters
        ----------
        side : Side
            Team whose bank is requested.
        bank_type : BankType
            Possession context.

        Returns
        -------
        FormationBank | None
            Stored bank, or ``None`` when nothing was configured.
        """
        return self.banks.get((side, bank_type))

    def complete_bank(self, side: Side, bank_type: BankType) -> Optional[FormationBank]:
        """Return the shared bank only if all its slots are populated.

        Parameters
        ----------
        side : Side
            Team whose bank is requested.
        bank_type : BankType
            Possession context.

        Returns
        -------
        FormationBank | None
            Complete bank, or ``None`` when missing or partial.
        """
        bank = self.get(side, bank_type)
        if bank is None or not bank.is_complete:
            return None
        return bank
