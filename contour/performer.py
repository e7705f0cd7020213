"""Turns pointer gestures into note events on explicitly owned outputs.

:class:`Performer` is the glue between input and sound. It holds a
:class:`~contour.constraint_engine.ConstraintEngine`, a
:class:`~contour.voice_allocator.VoiceAllocator`, and optionally a
:class:`~contour.midi_output.MidiOutput`, a
:class:`~contour.scheduler.MusicalClock` and an
:class:`~contour.event_emitter.EventEmitter`. Nothing is global: build the
pieces, hand them in, and the performer owns them for the session.

Each pointer gets one voice for the primary note and one per secondary voice
relation. Voice ids take the form ``"pointer-<id>"`` for the primary and
``"pointer-<id>/<n>"`` for the n-th secondary. Voices may share a note number
(a drone on the primary's pitch, say); the MIDI port hears that note's
note-off only when the last voice holding it stops.
"""

import logging
import time
import typing

import contour.constants.velocity
import contour.constraint_engine
import contour.event_emitter
import contour.mapping
import contour.midi_output
import contour.scheduler
import contour.voice_allocator


logger = logging.getLogger(__name__)

PointerId = typing.Union[int, str]


class Performer:

	"""Plays the pipeline's output for one or more pointers."""

	def __init__ (
		self,
		engine: contour.constraint_engine.ConstraintEngine,
		allocator: typing.Optional[contour.voice_allocator.VoiceAllocator] = None,
		midi_out: typing.Optional[contour.midi_output.MidiOutput] = None,
		clock: typing.Optional[contour.scheduler.MusicalClock] = None,
		emitter: typing.Optional[contour.event_emitter.EventEmitter] = None,
		scale_type: str = "pentatonic",
		octaves: int = 3,
		hold: bool = False
	) -> None:

		"""
		Create a performer.

		Parameters:
			engine: The note-generation pipeline. When its config is not
				``enabled`` the performer maps positions straight onto a scale.
			allocator: Polyphony limiter (default: 4 voices).
			midi_out: Optional MIDI port for note messages.
			clock: Optional musical clock driven by :meth:`tick`.
			emitter: Event registry for ``note_on``, ``note_off`` and ``beat``.
			scale_type: Scale used for direct mapping (see
				:data:`contour.mapping.SCALE_INTERVALS`).
			octaves: Octaves spanned by direct mapping.
			hold: When True, :meth:`release` leaves notes sounding.
		"""

		self.engine = engine
		self.allocator = allocator or contour.voice_allocator.VoiceAllocator()
		self.midi_out = midi_out
		self.clock = clock
		self.emitter = emitter or contour.event_emitter.EventEmitter()
		self.scale_type = scale_type
		self.octaves = octaves
		self.hold = hold

		self._pointer_voices: typing.Dict[PointerId, typing.List[str]] = {}

		# Voices sounding each note number; the port only hears note-off when the last one stops.
		self._note_counts: typing.Dict[int, int] = {}


	def gesture (
		self,
		pointer_id: PointerId,
		nx: float,
		ny: float,
		velocity: typing.Optional[int] = None,
		rand: typing.Optional[float] = None,
		timestamp: typing.Optional[float] = None
	) -> contour.constraint_engine.EngineOutput:

		"""Play the notes for a pointer at a position.

		Voices whose note is unchanged keep sounding; changed voices are
		stopped and restarted. Voices stolen by the allocator are stopped too.

		Parameters:
			pointer_id: Identifies the pointer (e.g. a touch id).
			nx: Horizontal position in [0, 1].
			ny: Vertical position in [0, 1].
			velocity: Note velocity. Defaults to 100 with the engine enabled, or
				to the vertical position in direct mapping.
			rand: Random value in [0, 1) passed to the engine.
			timestamp: Event time in milliseconds (defaults to a monotonic clock).

		Returns:
			What was computed for this position.
		"""

		if timestamp is None:
			timestamp = time.monotonic() * 1000.0

		if self.engine.config.enabled:

			output = self.engine.process(
				nx,
				ny,
				velocity if velocity is not None else contour.constants.velocity.DEFAULT_VELOCITY,
				rand,
				timestamp
			)

		else:
			output = self._direct_mapping(nx, ny, velocity)

		notes = [output.primary_note, *output.secondary_notes]
		voice_ids = [self._voice_id(pointer_id, index) for index in range(len(notes))]

		# Secondary voices dropped since the last gesture (fewer relations configured).
		for voice_id in self._pointer_voices.get(pointer_id, []):
			if voice_id not in voice_ids:
				self._stop_voice(voice_id)

		for voice_id, note in zip(voice_ids, notes):

			voice = self.allocator.get_voice(voice_id)

			if voice is not None and voice.note == note:
				continue

			for released_id, released_note in self.allocator.note_on(voice_id, note, output.primary_velocity, timestamp):
				self._send_note_off(released_id, released_note)

			self._send_note_on(voice_id, note, output.primary_velocity)

		self._pointer_voices[pointer_id] = voice_ids

		return output


	def release (self, pointer_id: PointerId) -> None:

		"""Stop a pointer's notes, unless hold is on."""

		if self.hold:
			return

		for voice_id in self._pointer_voices.pop(pointer_id, []):
			self._stop_voice(voice_id)


	def tick (self, current_time_ms: float) -> typing.List[contour.scheduler.BeatEvent]:

		"""Advance the clock (if any) and emit a ``beat`` event per new tick."""

		if self.clock is None:
			return []

		events = self.clock.advance(current_time_ms)

		for event in events:
			self.emitter.emit(contour.event_emitter.BEAT, event)

		return events


	def set_polyphony (self, max_voices: int) -> None:

		"""Change the voice limit, stopping voices that no longer fit."""

		for voice_id, note in self.allocator.set_max_voices(max_voices):
			self._send_note_off(voice_id, note)


	def stop_all (self) -> None:

		"""Stop every sounding note and send a MIDI panic."""

		for voice_id, note in self.allocator.note_off_all():
			self._send_note_off(voice_id, note)

		self._pointer_voices.clear()
		self._note_counts.clear()

		if self.midi_out is not None:
			self.midi_out.panic()


	def _direct_mapping (
		self,
		nx: float,
		ny: float,
		velocity: typing.Optional[int]
	) -> contour.constraint_engine.EngineOutput:

		"""Map a position straight onto the configured scale, bypassing the engine."""

		scale_notes = contour.mapping.get_scale_notes(
			self.scale_type,
			self.engine.config.tonal_field.root_note,
			self.octaves
		)

		return contour.constraint_engine.EngineOutput(
			primary_note = contour.mapping.map_position_to_pitch(nx, scale_notes),
			primary_velocity = velocity if velocity is not None else contour.mapping.map_position_to_velocity(ny),
			secondary_notes = (),
			candidates = tuple(scale_notes),
			varied = False
		)


	def _stop_voice (self, voice_id: str) -> None:

		note = self.allocator.note_off(voice_id)

		if note is not None:
			self._send_note_off(voice_id, note)


	def _send_note_on (self, voice_id: str, note: int, velocity: int) -> None:

		logger.debug(f"Note on {voice_id}: {contour.mapping.midi_note_to_name(note)} ({note}) vel {velocity}")

		self._note_counts[note] = self._note_counts.get(note, 0) + 1

		if self.midi_out is not None:
			self.midi_out.note_on(note, velocity)

		self.emitter.emit(contour.event_emitter.NOTE_ON, voice_id, note, velocity)


	def _send_note_off (self, voice_id: str, note: int) -> None:

		logger.debug(f"Note off {voice_id}: {contour.mapping.midi_note_to_name(note)} ({note})")

		remaining = self._note_counts.get(note, 0) - 1

		if remaining > 0:
			self._note_counts[note] = remaining

		else:
			self._note_counts.pop(note, None)

			if self.midi_out is not None:
				self.midi_out.note_off(note)

		self.emitter.emit(contour.event_emitter.NOTE_OFF, voice_id, note)


	@staticmethod
	def _voice_id (pointer_id: PointerId, index: int) -> str:

		if index == 0:
			return f"pointer-{pointer_id}"

		return f"pointer-{pointer_id}/{index}"
