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
"""Utilities for constructing formation catalogs and agents from JSON.

The document layout mirrors ``data/formations.json``::

    {
      "formations": {
        "home": {"attack": [[x, y], [x, y], [x, y]], "defend": [...], "neutral": [...]},
        "away": {...}
      },
      "agents": [
        {"id": 1, "side": "home", "position": [x, y], "default_slot": 0,
         "local_banks": {"attack": [[x, y], null, [x, y]]}}
      ]
    }

A slot may be ``null`` to describe a partially configured bank. Partial banks
load fine; the assignment layer simply ignores them and falls back.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sideline.engine.geometry import Vector2D
from sideline.models.agent import Agent, validate_side
from sideline.models.formation import BANK_TYPES, BankType, FormationBank, FormationCatalog


def _point(value: Any) -> Optional[Tuple[float, float]]:
    """Convert a JSON ``[x, y]`` pair into a tuple.

    Parameters
    ----------
    value : Any
        Decoded JSON value; ``None`` marks an empty slot.

    Returns
    -------
    tuple[float, float] | None
        The coordinates, or ``None`` for an empty slot.

    Raises
    ------
    ValueError
        When ``value`` is not a two-element sequence of numbers.
    """
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Expected an [x, y] pair, got {value!r}")
    return float(value[0]), float(value[1])


def bank_from_list(bank_type: str, points: Sequence[Any]) -> FormationBank:
    """Build a ``FormationBank`` from a JSON list of slot coordinates.

    Parameters
    ----------
    bank_type : str
        ``"attack"``, ``"defend"`` or ``"neutral"``.
    points : Sequence[Any]
        Up to three ``[x, y]`` pairs or ``null`` entries.

    Returns
    -------
    FormationBank
        Bank in index order.

    Raises
    ------
    ValueError
        For an unknown bank type, more than three slots, or a malformed pair.
    """
    if bank_type not in BANK_TYPES:
        raise ValueError(f"Unknown bank type '{bank_type}'")
    return FormationBank.from_points(bank_type, [_point(p) for p in points])  # type: ignore[arg-type]


def _banks_from_dict(d: Dict[str, Any]) -> Dict[BankType, FormationBank]:
    """Build every bank described in a ``{bank_type: [...]}`` mapping.

    Parameters
    ----------
    d : Dict[str, Any]
        Mapping of bank type to slot list.

    Returns
    -------
    Dict[BankType, FormationBank]
        Banks keyed by type.
    """
    return {bank.bank_type: bank for bank in (bank_from_list(key, pts) for key, pts in d.items())}


def agent_from_dict(d: dict) -> Agent:
    """Build an ``Agent`` from a plain dictionary payload.

    Parameters
    ----------
    d
        A mapping with ``id`` and ``side`` and optionally ``position``
        (``[x, y]``), ``default_slot`` and ``local_banks``.

    Returns
    -------
    Agent
        A new agent with no slot assigned yet.

    Raises
    ------
    KeyError
        When ``id`` or ``side`` is missing.
    ValueError
        When the side, default slot or a local bank is invalid.
    """
    position = _point(d.get("position")) or (0.0, 0.0)
    return Agent(
        agent_id=int(d["id"]),
        side=validate_side(d["side"]),
        position=Vector2D(*position),
        default_slot=int(d.get("default_slot", 1)),
        local_banks=_banks_from_dict(d.get("local_banks", {}) or {}),
    )


def catalog_from_dict(data: Dict[str, Any]) -> FormationCatalog:
    """Build a ``FormationCatalog`` from the ``formations`` section.

    Parameters
    ----------
    data : Dict[str, Any]
        Mapping of side to ``{bank_type: [...]}``.

    Returns
    -------
    FormationCatalog
        Catalog holding every listed bank.
    """
    catalog = FormationCatalog()
    for side, banks in data.items():
        for bank in _banks_from_dict(banks).values():
            catalog.set_bank(validate_side(side), bank)
    return catalog


def load_setup_from_json(path: str) -> Tuple[FormationCatalog, List[Agent]]:
    """Load a formation catalog and agent roster from disk.

    Parameters
    ----------
    path
        The filesystem path to a JSON document following the
        ``data/formations.json`` schema.

    Returns
    -------
    tuple[FormationCatalog, list[Agent]]
        The shared catalog and the agents in file order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the ``formations`` section is missing.

    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Formations JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    catalog = catalog_from_dict(data["formations"])
    agents = [agent_from_dict(entry) for entry in data.get("agents", [])]
    return catalog, agents
