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
"""Possession memory that decides which formation context each side uses.

Raw ball ownership flickers whenever the ball is passed or knocked loose. The
resolver smooths that signal: the last side to own the ball keeps its
attacking shape for a short grace period before everyone drops back to the
neutral shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sideline.engine.config import ENGINE_CONFIG, PossessionConfig

if TYPE_CHECKING:
    from sideline.models.agent import Agent, Side
    from sideline.models.formation import BankType
    from sideline.utils.debug import AssignmentDebugger


class PossessionResolver:
    """Track ownership across ticks and expose the effective attacking side.

    Parameters
    ----------
    config : PossessionConfig | None, optional
        Grace timing; defaults to ``ENGINE_CONFIG.possession``.
    debugger : AssignmentDebugger | None, optional
        Receives a line whenever the effective possession state changes.
    """

    def __init__(
        self,
        config: Optional[PossessionConfig] = None,
        debugger: Optional["AssignmentDebugger"] = None,
    ) -> None:
        """Start with no recorded owner.

        Parameters
        ----------
        config : PossessionConfig | None, optional
            Grace timing; defaults to ``ENGINE_CONFIG.possession``.
        debugger : AssignmentDebugger | None, optional
            Receives possession transitions.
        """
        self.config = config if config is not None else ENGINE_CONFIG.possession
        self.debugger = debugger
        self.owner_side: Optional["Side"] = None
        self.last_owner_side: Optional["Side"] = None
        self.no_owner_since: Optional[float] = None
        self.now = 0.0
        self._last_reported: Optional[str] = None

    def observe(self, owner: Optional["Agent"], now: float) -> None:
        """Record the ball owner seen at ``now``.

        Parameters
        ----------
        owner : Agent | None
            Agent holding the ball, or ``None`` for a loose ball.
        now : float
            Monotonic clock value for the current tick.
        """
        self.now = now
        if owner is not None:
            self.owner_side = owner.side
            self.last_owner_side = owner.side
            self.no_owner_since = None
        else:
            self.owner_side = None
            if self.no_owner_since is None:
                self.no_owner_since = now
        self._report_transition()

    def have_owner(self) -> bool:
        """Return ``True`` when some agent holds the ball.

        Returns
        -------
        bool
            Whether the last observation had an owner.
        """
        return self.owner_side is not None

    def grace_active(self) -> bool:
        """Return ``True`` while the loose-ball grace window is still open.

        Returns
        -------
        bool
            ``False`` whenever the ball is owned or was never owned.
        """
        if self.have_owner() or self.no_owner_since is None or self.last_owner_side is None:
            return False
        return (self.now - self.no_owner_since) < self.config.grace_period

    def effective_attacking(self, side: "Side") -> bool:
        """Return whether ``side`` should use its attacking bank.

        Parameters
        ----------
        side : Side
            Team being evaluated.

        Returns
        -------
        bool
            ``True`` when ``side`` owns the ball, or lost it less than the
            grace period ago with nobody picking it up since.
        """
        if self.have_owner():
            return self.owner_side == side
        return self.last_owner_side == side and self.grace_active()

    def bank_type_for(self, side: "Side") -> "BankType":
        """Return the formation context ``side`` should use this tick.

        Parameters
        ----------
        side : Side
            Team being evaluated.

        Returns
        -------
        BankType
            ``"attack"``, ``"defend"`` or ``"neutral"``.
        """
        if self.effective_attacking(side):
            return "attack"
        if self.have_owner():
            return "defend"
        return "neutral"

    def describe(self) -> str:
        """Return a compact label of the effective possession state.

        Returns
        -------
        str
            ``"owned:<side>"``, ``"grace:<side>"`` or ``"neutral"``.
        """
        if self.owner_side is not None:
            return f"owned:{self.owner_side}"
        if self.grace_active():
            return f"grace:{self.last_owner_side}"
        return "neutral"

    def _report_transition(self) -> None:
        """Log the effective state when it differs from the last report."""
        label = self.describe()
        if label == self._last_reported:
            return
        self._last_reported = label
        if self.debugger:
            self.debugger.log_possession(self.now, label)
