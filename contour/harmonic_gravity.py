"""Harmonic gravity: probabilistic pull of note selection toward stable tones.

The root has the strongest attraction, chord tones (fifth, fourth, thirds) a
medium one and tensions the weakest. Gravity biases probability rather than
forcing a choice, so the pointer still decides *where* the music is while
gravity decides *how it resolves*.

Selection consumes a caller-supplied random value instead of an ambient
generator. The same ``rand`` sequence always yields the same notes, which is
what makes gestures replayable. :class:`SeededRandom` provides such sequences.
"""

import dataclasses
import random
import sys
import typing

import contour.constants
import contour.note_utils


GRAVITY_WEIGHTS: typing.Dict[int, float] = {
	0: 1.0,     # root
	7: 0.8,     # perfect 5th
	5: 0.6,     # perfect 4th
	4: 0.55,    # major 3rd
	3: 0.5,     # minor 3rd
	9: 0.4,     # major 6th
	2: 0.35,    # major 2nd
	10: 0.3,    # minor 7th
	8: 0.25,    # minor 6th
	11: 0.2,    # major 7th
	6: 0.15,    # tritone
	1: 0.1,     # minor 2nd
}

MIN_GRAVITY_WEIGHT = 0.1

_UINT32_MASK = 0xFFFFFFFF


@dataclasses.dataclass(frozen=True)
class GravityConfig:

	"""
	Settings for gravity-weighted selection.

	Parameters:
		root_note: MIDI note whose pitch class is the centre of gravity.
		gravity_strength: 0.0 = uniform choice, 1.0 = full bias toward stable
			tones. Clamped to [0, 1] when used.
	"""

	root_note: int = contour.constants.MIDDLE_C
	gravity_strength: float = 0.6


DEFAULT_GRAVITY_CONFIG = GravityConfig()


def gravity_weight (midi_note: int, root_note: int) -> float:

	"""Return the attraction weight of a note relative to a root (1.0 for the root itself)."""

	pc = contour.note_utils.pitch_class(midi_note, root_note)

	return GRAVITY_WEIGHTS.get(pc, MIN_GRAVITY_WEIGHT)


def apply_gravity (
	candidates: typing.Sequence[int],
	config: GravityConfig = DEFAULT_GRAVITY_CONFIG,
	rand: typing.Optional[float] = None,
	rng: typing.Optional[random.Random] = None
) -> int:

	"""Select one candidate note using gravity-weighted inverse-CDF sampling.

	Each candidate's weight is ``1 - s + s * gravity_weight``, a linear blend
	between uniform weighting (``s = 0``) and full gravity (``s = 1``). The
	cumulative distribution is walked from the heaviest candidate down, so
	``rand = 0`` always lands on the most stable note present.

	Parameters:
		candidates: MIDI notes to choose from, in any order.
		config: Root and gravity strength.
		rand: Random value in [0, 1). Out-of-range values are clamped. When
			omitted a value is drawn from ``rng``.
		rng: Source for the draw when ``rand`` is omitted. Anything with a
			``random()`` method works, including :class:`SeededRandom`. A fresh
			unseeded ``random.Random`` is used when both are omitted.

	Returns:
		The selected note. An empty candidate list returns ``config.root_note``,
		clamped to 0-127.

	Example:
		```python
		rng = SeededRandom(42)
		note = apply_gravity([60, 61, 67], GravityConfig(gravity_strength=1.0), rng())
		```
	"""

	if not candidates:
		return contour.note_utils.clamp_note(config.root_note)

	if len(candidates) == 1:
		return candidates[0]

	if rand is None:
		rand = (rng or random.Random()).random()

	strength = contour.note_utils.clamp(config.gravity_strength, 0.0, 1.0)

	weighted = [
		(note, 1.0 - strength + strength * gravity_weight(note, config.root_note))
		for note in candidates
	]

	# Strongest first (stable), so low draws resolve to the most stable tones.
	# With zero strength every weight is equal and the caller's order is kept.
	weighted.sort(key=lambda pair: pair[1], reverse=True)

	total = sum(weight for _, weight in weighted)
	r = contour.note_utils.clamp(rand, 0.0, 1.0 - sys.float_info.epsilon)
	cumulative = 0.0

	for note, weight in weighted:
		cumulative += weight / total
		if r < cumulative:
			return note

	# Floating-point shortfall in the cumulative sum lands on the last candidate.
	return weighted[-1][0]


def rank_by_gravity (
	candidates: typing.Sequence[int],
	root_note: int
) -> typing.List[typing.Tuple[int, float]]:

	"""Return ``(note, weight)`` pairs sorted by gravity weight, strongest first."""

	ranked = [(note, gravity_weight(note, root_note)) for note in candidates]

	return sorted(ranked, key=lambda pair: pair[1], reverse=True)


class SeededRandom:

	"""
	Deterministic 32-bit pseudo-random generator (mulberry32).

	Produces the same infinite sequence of floats in [0, 1) for a given seed,
	bit-for-bit, on any platform. Call the instance (or its :meth:`random`
	method) to draw the next value.
	"""

	def __init__ (self, seed: int = 0) -> None:

		"""Initialise the generator state from an integer seed (truncated to 32 bits)."""

		self.seed = int(seed)
		self._state = self.seed & _UINT32_MASK


	def random (self) -> float:

		"""Return the next value in [0, 1)."""

		self._state = (self._state + 0x6D2B79F5) & _UINT32_MASK
		state = self._state

		t = ((state ^ (state >> 15)) * (state | 1)) & _UINT32_MASK
		t = ((t + (((t ^ (t >> 7)) * (t | 61)) & _UINT32_MASK)) & _UINT32_MASK) ^ t

		return ((t ^ (t >> 14)) & _UINT32_MASK) / 4294967296.0


	def __call__ (self) -> float:

		return self.random()


def create_seeded_random (seed: int) -> typing.Callable[[], float]:

	"""Return a zero-argument callable producing a seeded [0, 1) sequence."""

	return SeededRandom(seed)
