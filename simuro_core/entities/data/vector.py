import math

import numpy as np


class Vector2D:
    """Immutable 2D vector in field coordinates (centimetres)."""

    __slots__ = ("_x", "_y")

    def __init__(self, *coords):
        # Handle (1, 2), ((1, 2)), [1, 2], np.array([1, 2])
        if len(coords) == 1:
            c = coords[0]
            if isinstance(c, (tuple, list, np.ndarray, Vector2D)):
                self._x = float(c[0])
                self._y = float(c[1])
            else:
                raise TypeError(f"Invalid single argument type for Vector2D: {type(c)}")
        elif len(coords) == 2:
            self._x = float(coords[0])
            self._y = float(coords[1])
        else:
            raise TypeError(f"Vector2D requires 2 coordinates, got {len(coords)}")

    def __iter__(self):
        yield self._x
        yield self._y

    def __getitem__(self, index: int) -> float:
        if index == 0:
            return self._x
        elif index == 1:
            return self._y
        raise IndexError("Vector2D index out of range")

    def __add__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2D":
        return Vector2D(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> "Vector2D":
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> "Vector2D":
        return Vector2D(self.x / scalar, self.y / scalar)

    def __neg__(self) -> "Vector2D":
        return Vector2D(-self.x, -self.y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2D):
            return NotImplemented
        return math.isclose(self.x, other.x, abs_tol=1e-9) and math.isclose(self.y, other.y, abs_tol=1e-9)

    __hash__ = None

    # immutable, so copies can share the instance
    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __array__(self, dtype=None, copy=None):
        return np.array([self.x, self.y], dtype=dtype)

    def mag(self) -> float:
        return math.hypot(self._x, self._y)

    def norm(self) -> "Vector2D":
        """Return a normalized copy of the vector. Returns zero vector if magnitude is too small."""
        magnitude = self.mag()
        if magnitude < 1e-8:
            return Vector2D(0.0, 0.0)
        return Vector2D(self._x / magnitude, self._y / magnitude)

    def distance_to(self, other: "Vector2D") -> float:
        return math.hypot(other[1] - self._y, other[0] - self._x)

    def is_finite(self) -> bool:
        return math.isfinite(self._x) and math.isfinite(self._y)

    def to_array(self) -> np.ndarray:
        return np.array(list(self))

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    def __repr__(self):
        return f"Vector2D(x={self.x}, y={self.y})"
