"""Direct position-to-note mapping and note naming helpers.

This is the simple mode that the tonal field replaces: the horizontal axis
indexes straight into a scale and the vertical axis sets velocity. The
performer falls back to it when the constraint engine is disabled.

Module-level constants:
- ``SCALE_INTERVALS``: scale name to semitone offsets from the root.
- ``NOTE_NAMES``: pitch class to sharp-spelled note name.
"""

import math
import typing

import contour.constants
import contour.note_utils


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"diatonic": [0, 2, 4, 5, 7, 9, 11],
	"chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
	"pentatonic": [0, 2, 4, 7, 9],
	"blues": [0, 3, 5, 6, 7, 10],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
}

NOTE_NAMES: typing.List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

DEFAULT_SCALE = "diatonic"


def midi_note_to_name (note: int) -> str:

	"""Return the note name with octave, C4 = 60 (e.g. ``"A4"`` for 69)."""

	octave = note // 12 - 1

	return f"{NOTE_NAMES[note % 12]}{octave}"


def midi_note_to_frequency (note: float) -> float:

	"""Return the equal-tempered frequency in Hz, A4 (69) = 440 Hz."""

	return 440.0 * math.pow(2.0, (note - 69) / 12.0)


def get_scale_notes (scale_type: str, root_note: int, octaves: int) -> typing.List[int]:

	"""
	Return the notes of a scale over ``octaves`` octaves from ``root_note``.

	Unknown scale names fall back to the major (diatonic) scale. Notes above
	127 are dropped.
	"""

	intervals = SCALE_INTERVALS.get(scale_type, SCALE_INTERVALS[DEFAULT_SCALE])

	return [
		root_note + octave * 12 + interval
		for octave in range(octaves)
		for interval in intervals
		if root_note + octave * 12 + interval <= contour.constants.MIDI_NOTE_MAX
	]


def normalize_position (x: float, y: float, width: float, height: float) -> typing.Tuple[float, float]:

	"""Convert surface coordinates to a position clamped to [0, 1] on both axes."""

	return (
		contour.note_utils.clamp_unit(x / width),
		contour.note_utils.clamp_unit(y / height),
	)


def map_position_to_pitch (nx: float, scale_notes: typing.Sequence[int]) -> int:

	"""Pick the scale note under a horizontal position (left = lowest)."""

	if not scale_notes:
		raise ValueError("Scale notes cannot be empty")

	index = math.floor(nx * len(scale_notes))

	return scale_notes[int(contour.note_utils.clamp(index, 0, len(scale_notes) - 1))]


def map_position_to_velocity (ny: float) -> int:

	"""Map a vertical position to velocity: top (0) is loudest, bottom (1) silent."""

	return contour.note_utils.round_half_up((1.0 - contour.note_utils.clamp_unit(ny)) * 127)
