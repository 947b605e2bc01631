"""
ASL alphabet gesture dictionary.

Each letter is a set of per-finger curl and direction constraints. Several
constraints on the same finger are alternatives: the best one counts.

J and Z need motion and cannot be described by a single frame, so they are
not part of the alphabet here.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from fingerspell.exceptions import GestureDefinitionError
from fingerspell.ml.fingers import Finger, FingerCurl, FingerDirection, coerce_finger

ASL_LETTERS = ("A", "B", "C", "D", "E", "F", "G", "I", "K", "L", "O", "R", "S", "U", "V", "W", "Y")


def _check_weight(weight: float) -> float:
    try:
        weight = float(weight)
    except (TypeError, ValueError):
        raise GestureDefinitionError(f"Weight must be a number, got {weight!r}") from None
    if not 0.0 < weight <= 1.0:
        raise GestureDefinitionError(f"Weight must be in (0, 1], got {weight}")
    return weight


def _finger(value) -> Finger:
    try:
        return coerce_finger(value)
    except ValueError as exc:
        raise GestureDefinitionError(str(exc)) from None


class GestureDescription:
    def __init__(self, letter: str):
        self.letter = letter
        self._curls: dict[Finger, list[tuple[FingerCurl, float]]] = {}
        self._directions: dict[Finger, list[tuple[FingerDirection, float]]] = {}
        self._frozen = False

    def __repr__(self) -> str:
        return f"GestureDescription({self.letter!r})"

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise GestureDefinitionError(f"Gesture {self.letter!r} is frozen")

    def add_curl(self, finger: Finger | str, curl: FingerCurl, weight: float = 1.0) -> GestureDescription:
        self._ensure_mutable()
        finger = _finger(finger)
        if not isinstance(curl, FingerCurl):
            raise GestureDefinitionError(f"Unknown curl for {self.letter!r}: {curl!r}")
        self._curls.setdefault(finger, []).append((curl, _check_weight(weight)))
        return self

    def add_direction(
        self,
        finger: Finger | str,
        direction: FingerDirection,
        weight: float = 1.0,
    ) -> GestureDescription:
        self._ensure_mutable()
        finger = _finger(finger)
        if not isinstance(direction, FingerDirection):
            raise GestureDefinitionError(f"Unknown direction for {self.letter!r}: {direction!r}")
        self._directions.setdefault(finger, []).append((direction, _check_weight(weight)))
        return self

    def freeze(self) -> None:
        self._frozen = True

    def curls_for(self, finger: Finger) -> tuple[tuple[FingerCurl, float], ...]:
        return tuple(self._curls.get(finger, ()))

    def directions_for(self, finger: Finger) -> tuple[tuple[FingerDirection, float], ...]:
        return tuple(self._directions.get(finger, ()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "letter": self.letter,
            "curls": [
                {"finger": f.value, "value": c.value, "weight": w}
                for f in Finger
                for c, w in self._curls.get(f, ())
            ],
            "directions": [
                {"finger": f.value, "value": d.value, "weight": w}
                for f in Finger
                for d, w in self._directions.get(f, ())
            ],
        }


class GestureDictionary:
    """Ordered, letter-keyed collection of gesture descriptions."""

    def __init__(self):
        self._gestures: dict[str, GestureDescription] = {}
        self._frozen = False

    def define(self, letter: str) -> GestureDescription:
        if self._frozen:
            raise GestureDefinitionError("Gesture dictionary is frozen")
        if not isinstance(letter, str) or not letter.strip():
            raise GestureDefinitionError(f"Gesture label must be a non-empty string, got {letter!r}")
        if letter in self._gestures:
            raise GestureDefinitionError(f"Gesture {letter!r} is already defined")
        description = GestureDescription(letter)
        self._gestures[letter] = description
        return description

    def freeze(self) -> GestureDictionary:
        for description in self._gestures.values():
            description.freeze()
        self._frozen = True
        return self

    @property
    def letters(self) -> tuple[str, ...]:
        return tuple(self._gestures)

    def get(self, letter: str) -> GestureDescription | None:
        return self._gestures.get(letter)

    def __getitem__(self, letter: str) -> GestureDescription:
        return self._gestures[letter]

    def __contains__(self, letter: object) -> bool:
        return letter in self._gestures

    def __iter__(self) -> Iterator[GestureDescription]:
        return iter(self._gestures.values())

    def __len__(self) -> int:
        return len(self._gestures)


def build_asl_dictionary() -> GestureDictionary:
    T, I, M, R, P = Finger.THUMB, Finger.INDEX, Finger.MIDDLE, Finger.RING, Finger.PINKY
    NO, HALF, FULL = FingerCurl.NO_CURL, FingerCurl.HALF_CURL, FingerCurl.FULL_CURL
    UP = FingerDirection.VERTICAL_UP
    LEFT, RIGHT = FingerDirection.HORIZONTAL_LEFT, FingerDirection.HORIZONTAL_RIGHT
    UP_LEFT, UP_RIGHT = FingerDirection.DIAGONAL_UP_LEFT, FingerDirection.DIAGONAL_UP_RIGHT

    gestures = GestureDictionary()

    def curls(g: GestureDescription, *states: FingerCurl) -> GestureDescription:
        for finger, state in zip(Finger, states):
            g.add_curl(finger, state, 1.0)
        return g

    # A: fist, thumb straight up along the side
    a = curls(gestures.define("A"), NO, FULL, FULL, FULL, FULL)
    a.add_direction(T, UP, 0.8)

    # B: flat hand, fingers up, thumb folded across the palm
    b = curls(gestures.define("B"), HALF, NO, NO, NO, NO)
    for finger in (I, M, R, P):
        b.add_direction(finger, UP, 0.8)

    # C: curved hand, like holding a cup
    c = curls(gestures.define("C"), NO, HALF, HALF, HALF, HALF)
    c.add_direction(T, UP_LEFT, 0.8)
    c.add_direction(T, UP_RIGHT, 0.8)

    # D: index up, the others round onto the thumb
    d = curls(gestures.define("D"), HALF, NO, FULL, FULL, FULL)
    d.add_direction(I, UP, 0.8)

    # E: fingertips folded down onto a tucked thumb
    curls(gestures.define("E"), FULL, FULL, FULL, FULL, FULL)

    # F: index and thumb make a ring, three fingers up
    f = curls(gestures.define("F"), HALF, FULL, NO, NO, NO)
    for finger in (M, R, P):
        f.add_direction(finger, UP, 0.8)

    # G: index and thumb parallel, pointing sideways
    g = curls(gestures.define("G"), NO, NO, FULL, FULL, FULL)
    for finger in (T, I):
        g.add_direction(finger, LEFT, 0.8)
        g.add_direction(finger, RIGHT, 0.8)

    # I: pinky up
    i = curls(gestures.define("I"), HALF, FULL, FULL, FULL, NO)
    i.add_direction(P, UP, 0.8)

    # K: index up, middle angled out, thumb up between them
    k = curls(gestures.define("K"), NO, NO, NO, FULL, FULL)
    k.add_direction(T, UP, 0.8)
    k.add_direction(I, UP, 0.8)
    k.add_direction(M, UP_RIGHT, 0.8)
    k.add_direction(M, UP_LEFT, 0.8)

    # L: thumb out sideways, index up
    l_ = curls(gestures.define("L"), NO, NO, FULL, FULL, FULL)
    l_.add_direction(T, LEFT, 0.8)
    l_.add_direction(T, RIGHT, 0.8)
    l_.add_direction(I, UP, 0.8)

    # O: all fingertips curve onto the thumb
    curls(gestures.define("O"), HALF, HALF, HALF, HALF, HALF)

    # R: index crossed over middle
    r = curls(gestures.define("R"), HALF, NO, NO, FULL, FULL)
    r.add_direction(I, UP_RIGHT, 0.8)
    r.add_direction(M, UP_LEFT, 0.8)

    # S: fist, thumb across the front of the fingers
    curls(gestures.define("S"), HALF, FULL, FULL, FULL, FULL)

    # U: index and middle up together
    u = curls(gestures.define("U"), HALF, NO, NO, FULL, FULL)
    u.add_direction(I, UP, 0.8)
    u.add_direction(M, UP, 0.8)

    # V: index and middle spread apart
    v = curls(gestures.define("V"), HALF, NO, NO, FULL, FULL)
    v.add_direction(I, UP_LEFT, 0.7)
    v.add_direction(I, UP_RIGHT, 0.7)
    v.add_direction(M, UP_RIGHT, 0.7)
    v.add_direction(M, UP_LEFT, 0.7)

    # W: three fingers spread
    w = curls(gestures.define("W"), HALF, NO, NO, NO, FULL)
    w.add_direction(I, UP_LEFT, 0.7)
    w.add_direction(I, UP_RIGHT, 0.7)
    w.add_direction(M, UP, 0.8)
    w.add_direction(R, UP_RIGHT, 0.7)
    w.add_direction(R, UP_LEFT, 0.7)

    # Y: thumb and pinky out
    y = curls(gestures.define("Y"), NO, FULL, FULL, FULL, NO)
    y.add_direction(T, LEFT, 0.8)
    y.add_direction(T, RIGHT, 0.8)
    y.add_direction(P, UP, 0.8)

    return gestures.freeze()
