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
"""Planar vector maths shared by the assignment layer.

Slot and agent positions, as well as the movement intents handed to the
steering collaborator, are expressed with :class:`Vector2D`.
"""
import math
from dataclasses import dataclass

ZERO_EPSILON = 1e-6


@dataclass(frozen=True)
class Vector2D:
    """Immutable two-dimensional vector.

    Parameters
    ----------
    x : float
        Horizontal component in world units.
    y : float
        Vertical component in world units.
    """

    x: float
    y: float

    def __add__(self, other: "Vector2D") -> "Vector2D":
        """Return the vector sum of ``self`` and ``other``."""
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        """Return the vector difference ``self - other``."""
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2D":
        """Scale the vector by ``scalar``."""
        return Vector2D(self.x * scalar, self.y * scalar)

    def __neg__(self) -> "Vector2D":
        """Return the vector pointing the opposite way."""
        return Vector2D(-self.x, -self.y)

    def magnitude(self) -> float:
        """Return the Euclidean length of the vector.

        Returns
        -------
        float
            Scalar length in world units.
        """
        return math.hypot(self.x, self.y)

    def magnitude_squared(self) -> float:
        """Return the squared length, avoiding the square root.

        Returns
        -------
        float
            ``x * x + y * y``.
        """
        return self.x * self.x + self.y * self.y

    def normalize(self) -> "Vector2D":
        """Return a unit vector pointing in the same direction as ``self``.

        Returns
        -------
        Vector2D
            Normalised vector; zero vector when ``self`` has no magnitude.
        """
        mag = self.magnitude()
        if mag == 0:
            return Vector2D(0.0, 0.0)
        return Vector2D(self.x / mag, self.y / mag)

    def is_zero(self) -> bool:
        """Return whether the vector is numerically indistinguishable from zero.

        Returns
        -------
        bool
            ``True`` when the squared length falls below ``ZERO_EPSILON``.
        """
        return self.magnitude_squared() < ZERO_EPSILON

    def distance_to(self, other: "Vector2D") -> float:
        """Return the straight-line distance between ``self`` and ``other``.

        Parameters
        ----------
        other : Vector2D
            Point whose separation from ``self`` should be measured.

        Returns
        -------
        float
            Euclidean distance between the two points.
        """
        return (other - self).magnitude()

    def lerp(self, other: "Vector2D", t: float) -> "Vector2D":
        """Linearly interpolate from ``self`` toward ``other``.

        Parameters
        ----------
        other : Vector2D
            End point of the interpolation.
        t : float
            Blend factor, clamped to ``[0, 1]``.

        Returns
        -------
        Vector2D
            ``self`` when ``t`` is 0, ``other`` when ``t`` is 1.
        """
        t = clamp01(t)
        return Vector2D(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def as_tuple(self) -> tuple[float, float]:
        """Return the components as a plain tuple for logging.

        Returns
        -------
        tuple[float, float]
            ``(x, y)`` pair.
        """
        return (self.x, self.y)


ORIGIN = Vector2D(0.0, 0.0)


def clamp01(value: float) -> float:
    """Clamp ``value`` into the unit interval.

    Parameters
    ----------
    value : float
        Number to clamp.

    Returns
    -------
    float
        ``value`` limited to ``[0, 1]``.
    """
    return max(0.0, min(1.0, value))


def inverse_lerp(start: float, end: float, value: float) -> float:
    """Return where ``value`` sits between ``start`` and ``end``.

    Parameters
    ----------
    start : float
        Value mapped to 0.
    end : float
        Value mapped to 1.
    value : float
        Value to locate.

    Returns
    -------
    float
        Clamped interpolation parameter; 0 when ``start`` equals ``end``.
    """
    if end == start:
        return 0.0
    return clamp01((value - start) / (end - start))
