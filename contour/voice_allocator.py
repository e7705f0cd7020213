"""Polyphony bookkeeping with oldest-first voice stealing.

:class:`VoiceAllocator` tracks which note each voice id is sounding. It makes
no sound itself: every call returns the ``(voice_id, note)`` pairs the caller
must now silence, so the same allocator can sit in front of a MIDI port, a
software synth or a test recorder.
"""

import dataclasses
import itertools
import typing


@dataclasses.dataclass(frozen=True)
class Voice:

	"""A sounding note held by the allocator."""

	voice_id: str
	note: int
	velocity: int
	start_time: float
	sequence: int


Released = typing.List[typing.Tuple[str, int]]


class VoiceAllocator:

	"""Limits simultaneous notes, stealing the oldest voice when full."""

	def __init__ (self, max_voices: int = 4) -> None:

		"""Create an allocator allowing ``max_voices`` simultaneous notes."""

		if max_voices < 1:
			raise ValueError("Max voices must be at least 1")

		self.max_voices = max_voices
		self._voices: typing.Dict[str, Voice] = {}
		self._counter = itertools.count()


	def __contains__ (self, voice_id: object) -> bool:

		return voice_id in self._voices


	@property
	def active_count (self) -> int:

		"""Number of voices currently sounding."""

		return len(self._voices)


	def get_voice (self, voice_id: str) -> typing.Optional[Voice]:

		"""Return the voice held under an id, if any."""

		return self._voices.get(voice_id)


	def note_on (self, voice_id: str, note: int, velocity: int, start_time: float = 0.0) -> Released:

		"""
		Start a note under ``voice_id``.

		Returns the notes that must be stopped first: the voice's own previous
		note when the id is re-triggered, and the oldest voice when the
		allocator is full. Ties in start time go to the earliest allocated.
		"""

		released: Released = []

		previous = self.note_off(voice_id)

		if previous is not None:
			released.append((voice_id, previous))

		released.extend(self._steal(self.max_voices - 1))

		self._voices[voice_id] = Voice(
			voice_id = voice_id,
			note = note,
			velocity = velocity,
			start_time = start_time,
			sequence = next(self._counter)
		)

		return released


	def note_off (self, voice_id: str) -> typing.Optional[int]:

		"""Stop a voice and return its note, or None if the id was not sounding."""

		voice = self._voices.pop(voice_id, None)

		return voice.note if voice is not None else None


	def note_off_all (self) -> Released:

		"""Stop every voice, oldest first."""

		return self._steal(0)


	def set_max_voices (self, max_voices: int) -> Released:

		"""Change the polyphony limit (minimum 1), stealing voices that no longer fit."""

		self.max_voices = max(1, max_voices)

		return self._steal(self.max_voices)


	def _steal (self, keep: int) -> Released:

		"""Release the oldest voices until at most ``keep`` remain."""

		released: Released = []

		oldest_first = sorted(self._voices.values(), key=lambda voice: (voice.start_time, voice.sequence))

		for voice in oldest_first[:max(0, len(oldest_first) - keep)]:
			del self._voices[voice.voice_id]
			released.append((voice.voice_id, voice.note))

		return released
