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
"""Tick-scoped claim ledger for formation slots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, NamedTuple, Optional

if TYPE_CHECKING:
    from sideline.models.agent import Side
    from sideline.models.formation import BankType


class ClaimKey(NamedTuple):
    """Identity of one claimable slot.

    Parameters
    ----------
    side : Side
        Team the slot belongs to.
    bank_type : BankType
        Possession context of the bank.
    slot_index : int
        Slot index within the bank.
    """

    side: "Side"
    bank_type: "BankType"
    slot_index: int


class SlotClaimRegistry:
    """First-come ledger of slot claims, emptied once per tick.

    The driver may call :meth:`begin_tick` before agents evaluate, or pass the
    current tick id on each call and let the first access of a new tick clear
    the ledger. Both give exactly one reset per tick whatever the evaluation
    order is.
    """

    def __init__(self) -> None:
        """Create an empty ledger that has not seen a tick yet."""
        self._owners: Dict[ClaimKey, int] = {}
        self._tick_id: Optional[int] = None

    @property
    def tick_id(self) -> Optional[int]:
        """Return the tick the ledger currently belongs to."""
        return self._tick_id

    def begin_tick(self, tick_id: int) -> None:
        """Clear the ledger if ``tick_id`` differs from the stored tick.

        Parameters
        ----------
        tick_id : int
            Monotonic tick counter of the tick about to be evaluated.
        """
        if tick_id != self._tick_id:
            self._owners.clear()
            self._tick_id = tick_id

    def try_claim(
        self,
        side: "Side",
        bank_type: "BankType",
        slot_index: int,
        claimant_id: int,
        tick_id: Optional[int] = None,
    ) -> bool:
        """Claim a slot for ``claimant_id`` unless someone else already has it.

        Parameters
        ----------
        side : Side
            Team of the claimant.
        bank_type : BankType
            Possession context of the bank being claimed from.
        slot_index : int
            Slot being claimed.
        claimant_id : int
            Stable id of the claiming agent.
        tick_id : int | None, optional
            Current tick; when given, a stale ledger is cleared first.

        Returns
        -------
        bool
            ``True`` when the slot is now (or already was) held by
            ``claimant_id``; ``False`` when another agent got there first.
        """
        if tick_id is not None:
            self.begin_tick(tick_id)
        key = ClaimKey(side, bank_type, slot_index)
        owner = self._owners.get(key)
        if owner is None:
            self._owners[key] = claimant_id
            return True
        return owner == claimant_id

    def claimant(
        self,
        side: "Side",
        bank_type: "BankType",
        slot_index: int,
        tick_id: Optional[int] = None,
    ) -> Optional[int]:
        """Return who holds a slot this tick.

        Parameters
        ----------
        side : Side
            Team of the slot.
        bank_type : BankType
            Possession context of the bank.
        slot_index : int
            Slot index.
        tick_id : int | None, optional
            Current tick; when given, a stale ledger is cleared first.

        Returns
        -------
        int | None
            Claimant id, or ``None`` when unclaimed.
        """
        if tick_id is not None:
            self.begin_tick(tick_id)
        return self._owners.get(ClaimKey(side, bank_type, slot_index))

    def __len__(self) -> int:
        """Return the number of claims recorded this tick."""
        return len(self._owners)
