"""Continuous tonal space mapping a 2D position to candidate pitches.

The horizontal axis controls harmonic breadth: at ``nx = 0`` only the root and
fifth are available, and each step to the right admits the next pitch class in
:data:`STABILITY_ORDER` until the full chromatic set is reached at ``nx = 1``.
The vertical axis controls register, interpolating continuously between
``base_octave`` and ``base_octave + octave_range``.

Nearby positions produce overlapping candidate sets, so movement across the
surface feels continuous rather than stepped.
"""

import dataclasses
import math
import typing

import contour.constants
import contour.note_utils


# Pitch classes ordered from most stable (root) to most tense (minor 2nd).
STABILITY_ORDER: typing.Tuple[int, ...] = (0, 7, 5, 4, 3, 9, 2, 10, 8, 6, 11, 1)


@dataclasses.dataclass(frozen=True)
class TonalFieldConfig:

	"""
	Root and register settings for the tonal field.

	Parameters:
		root_note: MIDI note of the tonal centre (e.g. 60 = C4). Not bounds
			checked; generated notes outside 0-127 are dropped instead.
		base_octave: Octave offset from ``root_note`` at the bottom of the field.
		octave_range: Number of octaves spanned by the vertical axis.
	"""

	root_note: int = contour.constants.MIDDLE_C
	base_octave: int = 0
	octave_range: int = 3

	def __post_init__ (self) -> None:
		if self.octave_range < 0:
			raise ValueError("Octave range must not be negative")


DEFAULT_TONAL_FIELD_CONFIG = TonalFieldConfig()


def stability_order () -> typing.Tuple[int, ...]:

	"""Return pitch classes sorted by harmonic stability, root first."""

	return STABILITY_ORDER


def pitch_class_stability (pitch_class: int) -> float:

	"""
	Return the tension of a pitch class relative to the root.

	0.0 is the root (most stable) and 1.0 the minor 2nd (most tense). Used for
	visual overlays and ranking, never for note selection.
	"""

	pc = pitch_class % 12

	return STABILITY_ORDER.index(pc) / (len(STABILITY_ORDER) - 1)


def get_candidate_notes (
	nx: float,
	ny: float,
	config: TonalFieldConfig = DEFAULT_TONAL_FIELD_CONFIG
) -> typing.List[int]:

	"""Map a normalised position to candidate MIDI notes, nearest to the register centre first.

	Parameters:
		nx: Horizontal position. 0 = stable (root and fifth), 1 = full chromatic.
		ny: Vertical position. 0 = bottom of the register, 1 = top.
		config: Root and register settings.

	Returns:
		Candidate notes within 0-127, sorted by distance from the register
		centre. Notes that would fall outside the MIDI range are omitted.

	Example:
		```python
		get_candidate_notes(0.0, 0.0)   # [60, 67, 72, 79]
		```
	"""

	x = contour.note_utils.clamp_unit(nx)
	y = contour.note_utils.clamp_unit(ny)

	count = contour.note_utils.round_half_up(2 + x * 10)
	active_pitch_classes = STABILITY_ORDER[:count]

	octave_center = config.base_octave + y * config.octave_range
	octave_low = math.floor(octave_center)
	octave_high = min(octave_low + 1, config.base_octave + config.octave_range)

	candidates: typing.List[int] = []

	for octave in range(octave_low, octave_high + 1):

		for pc in active_pitch_classes:

			note = config.root_note + octave * 12 + pc

			# Out-of-range notes are omitted rather than clamped so the field never doubles a pitch.
			if contour.constants.MIDI_NOTE_MIN <= note <= contour.constants.MIDI_NOTE_MAX:
				candidates.append(note)

	center_note = config.root_note + octave_center * 12

	return sorted(candidates, key=lambda note: abs(note - center_note))


def tonal_distance (
	a: typing.Tuple[float, float],
	b: typing.Tuple[float, float]
) -> float:

	"""
	Distance between two positions in the field.

	The horizontal component is weighted double because it changes harmonic
	content, while the vertical one only moves register.
	"""

	dx = a[0] - b[0]
	dy = a[1] - b[1]

	return math.sqrt(dx * dx * 4 + dy * dy)
