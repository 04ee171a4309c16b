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
"""Structured logging utilities used to trace role and slot assignment."""
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque, Dict, List, Optional, TextIO, Tuple


def _slot_label(index: Optional[int]) -> str:
    """Render an optional slot index for a log line.

    Parameters
    ----------
    index : int | None
        Slot index, or ``None`` when no slot is held.

    Returns
    -------
    str
        The index as text, or ``"-"``.
    """
    return "-" if index is None else str(index)


class AssignmentDebugger:
    """Helper object that streams assignment telemetry to disk.

    Parameters
    ----------
    output_dir : str, default="debug_logs"
        Directory where new session logs are created; created automatically when missing.
    """

    def __init__(self, output_dir: str = "debug_logs") -> None:
        """Initialise the debugger and start the first logging session.

        Parameters
        ----------
        output_dir : str
            Filesystem directory where log files are created or appended.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file: Optional[TextIO] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=200)
        self.start_new_session()

    @property
    def log_path(self) -> Path:
        """Return the path of the current session file."""
        return self.output_dir / f"assignment_debug_{self.session_start}.txt"

    def start_new_session(self) -> None:
        """Start a new debug logging session."""
        if self.log_file:
            self.log_file.close()

        self.log_file = open(self.log_path, "w", encoding="utf-8")
        self.log_file.write(f"=== Assignment Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_tick(
        self,
        match_time: float,
        tick_id: int,
        possession: str,
        chasers: Dict[str, Optional[int]],
        slots_held: int,
    ) -> None:
        """Log a one-line summary of a completed tick.

        Parameters
        ----------
        match_time : float
            Clock value of the tick in seconds.
        tick_id : int
            Monotonic tick counter.
        possession : str
            Effective possession label, for example ``"grace:home"``.
        chasers : Dict[str, int | None]
            Chaser id per side.
        slots_held : int
            Number of agents that ended the tick on a formation slot.
        """
        chaser_str = ", ".join(f"{side}={_slot_label(agent_id)}" for side, agent_id in chasers.items())
        self._write_log(
            "TICK",
            f"Time: {match_time:.2f}s | Tick: {tick_id} | Possession: {possession} | "
            f"Chasers: {chaser_str} | Slots held: {slots_held}",
        )

    def log_possession(self, match_time: float, label: str) -> None:
        """Log a change in effective possession.

        Parameters
        ----------
        match_time : float
            Clock value in seconds.
        label : str
            New effective possession label.
        """
        self._write_log("POSSESSION", f"Time: {match_time:.2f}s | State: {label}")

    def log_chaser(
        self,
        match_time: float,
        side: str,
        previous_id: Optional[int],
        chaser_id: Optional[int],
    ) -> None:
        """Log a change of ball chaser on one side.

        Parameters
        ----------
        match_time : float
            Clock value in seconds.
        side : str
            Team whose chaser changed.
        previous_id : int | None
            Previous chaser, if any.
        chaser_id : int | None
            New chaser, if any.
        """
        self._write_log(
            "CHASER",
            f"Time: {match_time:.2f}s | Side: {side} | Chaser: {_slot_label(previous_id)} -> {_slot_label(chaser_id)}",
        )

    def log_assignment(
        self,
        match_time: float,
        agent_id: int,
        side: str,
        bank_type: str,
        previous_index: Optional[int],
        slot_index: Optional[int],
    ) -> None:
        """Log an agent moving to a different formation slot.

        Parameters
        ----------
        match_time : float
            Clock value in seconds.
        agent_id : int
            Agent whose slot changed.
        side : str
            Team of the agent.
        bank_type : str
            Bank context of the new slot.
        previous_index : int | None
            Slot held before the change.
        slot_index : int | None
            Slot held after the change.
        """
        self._write_log(
            "ASSIGNMENT",
            f"Time: {match_time:.2f}s | Agent {agent_id} ({side}) | Bank: {bank_type} | "
            f"Slot: {_slot_label(previous_index)} -> {_slot_label(slot_index)}",
        )

    def log_claim_denied(
        self,
        match_time: float,
        agent_id: int,
        side: str,
        bank_type: str,
        slot_index: int,
        holder_id: Optional[int],
    ) -> None:
        """Log a slot claim refused by the registry.

        Parameters
        ----------
        match_time : float
            Clock value in seconds.
        agent_id : int
            Agent whose claim was denied.
        side : str
            Team of the agent.
        bank_type : str
            Bank context of the slot.
        slot_index : int
            Slot that was already taken.
        holder_id : int | None
            Agent holding the slot this tick.
        """
        self._write_log(
            "CLAIM",
            f"Time: {match_time:.2f}s | Agent {agent_id} ({side}) | Bank: {bank_type} | "
            f"Slot: {slot_index} | Denied (held by {_slot_label(holder_id)})",
        )

    def log_fallback(self, match_time: float, agent_id: int, side: str, reason: str) -> None:
        """Log an agent falling back to formula positioning.

        Parameters
        ----------
        match_time : float
            Clock value in seconds.
        agent_id : int
            Agent without a slot.
        side : str
            Team of the agent.
        reason : str
            Short explanation, for example ``"no complete attack bank"``.
        """
        self._write_log("FALLBACK", f"Time: {match_time:.2f}s | Agent {agent_id} ({side}) | Reason: {reason}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest debug entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        if self.log_file:
            self.log_file.close()
            self.log_file = None
