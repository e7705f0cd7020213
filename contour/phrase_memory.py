"""Short-term phrase memory that keeps repeated gestures from sounding identical.

Provides :class:`PhraseMemory`, a bounded history of recently played notes.
The history is summarised as an interval pattern (successive semitone
differences), so a gesture is recognised by its *shape* regardless of
transposition. When a new gesture repeats the stored shape, a replay counter
rises and :meth:`PhraseMemory.apply_variation` nudges notes by a bounded
random offset that grows with the counter, saturating after four repeats.

The counter decays by one on each novel gesture rather than resetting, so a
single new move does not erase a long run of repetition.
"""

import dataclasses
import math
import random
import typing

import contour.note_utils


@dataclasses.dataclass(frozen=True)
class PhraseEvent:

	"""A note recorded into the phrase history."""

	note: int
	velocity: int
	timestamp: float


@dataclasses.dataclass(frozen=True)
class PhraseMemoryConfig:

	"""
	Settings for phrase memory.

	Parameters:
		max_length: Maximum number of events kept; the oldest is evicted first.
		variation_amount: Largest pitch offset in semitones once variation has
			saturated. 0 disables variation.
		similarity_threshold: 0.0-1.0. Patterns at least this similar to the
			stored phrase count as a repeat.
	"""

	max_length: int = 16
	variation_amount: float = 2
	similarity_threshold: float = 0.85

	def __post_init__ (self) -> None:
		if self.max_length < 1:
			raise ValueError("Phrase max length must be at least 1")


DEFAULT_PHRASE_CONFIG = PhraseMemoryConfig()

# Replays beyond this count no longer increase variation.
_VARIATION_SATURATION = 4


class PhraseMemory:

	"""Rolling note history with repeat detection and bounded variation."""

	def __init__ (self, config: PhraseMemoryConfig = DEFAULT_PHRASE_CONFIG) -> None:

		"""Create an empty phrase memory."""

		self.config = config
		self._buffer: typing.List[PhraseEvent] = []
		self._replay_count: int = 0


	def __len__ (self) -> int:

		return len(self._buffer)


	@property
	def replay_count (self) -> int:

		"""Number of repeats currently remembered (decays on novelty)."""

		return self._replay_count


	def configure (self, config: PhraseMemoryConfig) -> None:

		"""Swap in new settings, keeping history (trimmed to the new ``max_length``)."""

		self.config = config

		overflow = len(self._buffer) - config.max_length

		if overflow > 0:
			del self._buffer[:overflow]


	def record (self, note: int, velocity: int, timestamp: float) -> None:

		"""Append an event, evicting the oldest once ``max_length`` is exceeded."""

		self._buffer.append(PhraseEvent(note=note, velocity=velocity, timestamp=timestamp))

		if len(self._buffer) > self.config.max_length:
			self._buffer.pop(0)


	def get_phrase (self) -> typing.List[PhraseEvent]:

		"""Return a copy of the recorded events, oldest first."""

		return list(self._buffer)


	def get_last_note (self) -> typing.Optional[int]:

		"""Return the most recent note, or None if nothing has been recorded."""

		if not self._buffer:
			return None

		return self._buffer[-1].note


	def get_interval_pattern (self) -> typing.List[int]:

		"""Return successive semitone differences between recorded notes."""

		if len(self._buffer) < 2:
			return []

		return [
			current.note - previous.note
			for previous, current in zip(self._buffer, self._buffer[1:])
		]


	@staticmethod
	def similarity (pattern_a: typing.Sequence[int], pattern_b: typing.Sequence[int]) -> float:

		"""
		Positional exact-match ratio between two interval patterns.

		Compares element by element over the shorter pattern's length. This is
		deliberately not an edit distance: a pattern shifted by one position
		scores as unrelated.
		"""

		if not pattern_a or not pattern_b:
			return 0.0

		length = min(len(pattern_a), len(pattern_b))
		matches = sum(1 for i in range(length) if pattern_a[i] == pattern_b[i])

		return matches / length


	def check_and_evolve (self, candidate_pattern: typing.Sequence[int]) -> bool:

		"""
		Compare a candidate pattern against the stored phrase.

		Returns True (and increments the replay count) when the candidate is at
		least ``similarity_threshold`` similar. Otherwise decrements the replay
		count toward zero and returns False.
		"""

		current_pattern = self.get_interval_pattern()

		if PhraseMemory.similarity(current_pattern, candidate_pattern) >= self.config.similarity_threshold:
			self._replay_count += 1
			return True

		self._replay_count = max(0, self._replay_count - 1)

		return False


	def apply_variation (
		self,
		note: int,
		rand: typing.Optional[float] = None,
		rng: typing.Optional[random.Random] = None
	) -> int:

		"""Offset a note by up to ``variation_amount`` semitones, scaled by the replay count.

		Parameters:
			note: The note to vary.
			rand: Random value in [0, 1) choosing the offset uniformly from
				``[-max_shift, +max_shift]``. Drawn from ``rng`` when omitted.
			rng: Source for the draw when ``rand`` is omitted (a fresh unseeded
				``random.Random`` if none is given).

		Returns:
			The varied note, clamped to 0-127.
		"""

		if self.config.variation_amount <= 0:
			return note

		scale = min(self._replay_count, _VARIATION_SATURATION) / _VARIATION_SATURATION
		max_shift = math.ceil(self.config.variation_amount * scale)

		if max_shift == 0:
			return note

		if rand is None:
			rand = (rng or random.Random()).random()

		shift = math.floor(rand * (max_shift * 2 + 1)) - max_shift

		return contour.note_utils.clamp_note(note + shift)


	def clear (self) -> None:

		"""Forget every recorded event and reset the replay count."""

		self._buffer = []
		self._replay_count = 0
