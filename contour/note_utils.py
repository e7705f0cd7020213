import math

import contour.constants


def clamp (value: float, low: float, high: float) -> float:

	"""Constrain a value to the closed range [low, high]."""

	return max(low, min(high, value))


def clamp_note (note: int) -> int:

	"""Constrain a MIDI note number to 0-127."""

	return int(max(contour.constants.MIDI_NOTE_MIN, min(contour.constants.MIDI_NOTE_MAX, note)))


def clamp_unit (value: float) -> float:

	"""Constrain a normalised coordinate to [0, 1]."""

	return max(0.0, min(1.0, value))


def round_half_up (value: float) -> int:

	"""
	Round to the nearest integer, with ties going toward positive infinity.

	Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``),
	which would move grid ticks and pitch-class counts at exact halves.
	"""

	return int(math.floor(value + 0.5))


def pitch_class (note: int, root: int = 0) -> int:

	"""Return the pitch class (0-11) of a note relative to a root."""

	return (note - root) % 12
