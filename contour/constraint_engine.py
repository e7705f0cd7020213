"""The note-generation pipeline: position in, primary and secondary notes out.

:class:`ConstraintEngine` chains the tonal field, harmonic gravity, phrase
memory and voice relations::

	position -> candidates -> gravity selection -> phrase variation -> secondary voices

It owns the only mutable session state in the pipeline: one
:class:`~contour.phrase_memory.PhraseMemory` and the previous primary note.
Configuration is an immutable :class:`ConstraintEngineConfig`; updates go
through :func:`merge_config`, which merges one group at a time and returns a
new value.
"""

import collections.abc
import dataclasses
import logging
import random
import time
import typing

import contour.constants.velocity
import contour.harmonic_gravity
import contour.note_utils
import contour.phrase_memory
import contour.tonal_field
import contour.voice_relations


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ConstraintEngineConfig:

	"""
	Complete pipeline settings.

	Parameters:
		tonal_field: Root and register of the tonal field.
		gravity: Root and strength of harmonic gravity.
		phrase: Phrase memory length, variation and similarity threshold.
		voice_relations: Rules deriving secondary notes, in output order.
		enabled: Master switch read by the caller (e.g. the performer) to
			choose between this pipeline and direct scale mapping. The engine
			itself ignores it.
	"""

	tonal_field: contour.tonal_field.TonalFieldConfig = contour.tonal_field.DEFAULT_TONAL_FIELD_CONFIG
	gravity: contour.harmonic_gravity.GravityConfig = contour.harmonic_gravity.DEFAULT_GRAVITY_CONFIG
	phrase: contour.phrase_memory.PhraseMemoryConfig = contour.phrase_memory.DEFAULT_PHRASE_CONFIG
	voice_relations: typing.Tuple[contour.voice_relations.VoiceRelation, ...] = ()
	enabled: bool = False


DEFAULT_CONSTRAINT_CONFIG = ConstraintEngineConfig()

# Nested config groups merged key by key rather than replaced.
_CONFIG_GROUPS: typing.Dict[str, type] = {
	"tonal_field": contour.tonal_field.TonalFieldConfig,
	"gravity": contour.harmonic_gravity.GravityConfig,
	"phrase": contour.phrase_memory.PhraseMemoryConfig,
}


@dataclasses.dataclass(frozen=True)
class EngineOutput:

	"""The result of processing one position. A snapshot; safe to pass anywhere."""

	primary_note: int
	primary_velocity: int
	secondary_notes: typing.Tuple[int, ...]
	candidates: typing.Tuple[int, ...]
	varied: bool


def _merge_group (group: typing.Any, value: typing.Any, name: str) -> typing.Any:

	"""Merge a mapping into one config group, or accept a ready-made group object."""

	group_type = _CONFIG_GROUPS[name]

	if isinstance(value, group_type):
		return value

	if not isinstance(value, collections.abc.Mapping):
		raise ValueError(f"Config group {name!r} must be a mapping or {group_type.__name__}")

	known = {field.name for field in dataclasses.fields(group_type)}
	unknown = set(value) - known

	if unknown:
		raise ValueError(f"Unknown keys for config group {name!r}: {', '.join(sorted(unknown))}")

	return dataclasses.replace(group, **value)


def _coerce_relations (value: typing.Iterable[typing.Any]) -> typing.Tuple[contour.voice_relations.VoiceRelation, ...]:

	"""Accept relation objects or plain mappings."""

	return tuple(
		relation if isinstance(relation, contour.voice_relations.VoiceRelation)
		else contour.voice_relations.VoiceRelation.from_dict(relation)
		for relation in value
	)


def merge_config (
	config: ConstraintEngineConfig,
	partial: typing.Mapping[str, typing.Any]
) -> ConstraintEngineConfig:

	"""Return a new config with ``partial`` deep-merged into ``config``.

	Nested groups (``tonal_field``, ``gravity``, ``phrase``) are merged key by
	key, so updating one field leaves its siblings untouched. ``voice_relations``
	and ``enabled`` are replaced.

	Parameters:
		config: The config to start from. Not modified.
		partial: Mapping of top-level keys to new values. Group values may be
			mappings or complete group objects.

	Raises:
		ValueError: For unknown keys or invalid group values.

	Example:
		```python
		merged = merge_config(config, {"gravity": {"root_note": 48}})
		merged.gravity.gravity_strength == config.gravity.gravity_strength   # True
		```
	"""

	changes: typing.Dict[str, typing.Any] = {}

	for key, value in partial.items():

		if key in _CONFIG_GROUPS:
			changes[key] = _merge_group(getattr(config, key), value, key)

		elif key == "voice_relations":
			changes[key] = _coerce_relations(value)

		elif key == "enabled":
			changes[key] = bool(value)

		else:
			raise ValueError(f"Unknown config key: {key!r}")

	return dataclasses.replace(config, **changes)


class ConstraintEngine:

	"""
	Turns normalised positions into primary and secondary notes.

	Call :meth:`process` once per input sample, serially. The engine remembers
	recent notes so that repeated gestures are varied rather than replayed
	verbatim.
	"""

	def __init__ (
		self,
		config: typing.Union[ConstraintEngineConfig, typing.Mapping[str, typing.Any], None] = None,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Create an engine.

		Parameters:
			config: A full config, a partial mapping merged onto the defaults,
				or None for the defaults.
			rng: Source of random draws when :meth:`process` is called without
				an explicit ``rand``. Seed it for reproducible sessions.
		"""

		if config is None:
			config = DEFAULT_CONSTRAINT_CONFIG

		elif not isinstance(config, ConstraintEngineConfig):
			config = merge_config(DEFAULT_CONSTRAINT_CONFIG, config)

		self._config = config
		self.rng = rng or random.Random()
		self._phrase_memory = contour.phrase_memory.PhraseMemory(config.phrase)
		self._previous_primary_note: typing.Optional[int] = None


	@property
	def config (self) -> ConstraintEngineConfig:

		"""The current configuration."""

		return self._config


	@property
	def phrase_memory (self) -> contour.phrase_memory.PhraseMemory:

		"""The engine's phrase memory, for inspection."""

		return self._phrase_memory


	@property
	def previous_primary_note (self) -> typing.Optional[int]:

		"""The last primary note produced, or None after a reset."""

		return self._previous_primary_note


	def process (
		self,
		nx: float,
		ny: float,
		velocity: int = contour.constants.velocity.DEFAULT_VELOCITY,
		rand: typing.Optional[float] = None,
		timestamp: typing.Optional[float] = None
	) -> EngineOutput:

		"""Run one position through the full pipeline.

		Parameters:
			nx: Horizontal position in [0, 1] (clamped). Controls harmonic breadth.
			ny: Vertical position in [0, 1] (clamped). Controls register.
			velocity: Note velocity, passed through to the output.
			rand: Random value in [0, 1) used for both gravity selection and
				variation. Drawn from the engine's ``rng`` when omitted.
			timestamp: Event time in milliseconds for the phrase history.
				Defaults to a monotonic clock.

		Returns:
			An :class:`EngineOutput` snapshot.
		"""

		if rand is None:
			rand = self.rng.random()

		if timestamp is None:
			timestamp = time.monotonic() * 1000.0

		candidates = contour.tonal_field.get_candidate_notes(nx, ny, self._config.tonal_field)
		primary_note = contour.note_utils.clamp_note(
			contour.harmonic_gravity.apply_gravity(candidates, self._config.gravity, rand)
		)

		varied = False
		current_pattern = self._phrase_memory.get_interval_pattern()
		last_note = self._phrase_memory.get_last_note()

		if len(current_pattern) > 2 and last_note is not None:

			# The pattern as it would read with this note appended and the oldest interval dropped.
			hypothetical_pattern = current_pattern[1:] + [primary_note - last_note]

			if self._phrase_memory.check_and_evolve(hypothetical_pattern):

				selected_note = primary_note
				primary_note = contour.note_utils.clamp_note(self._phrase_memory.apply_variation(primary_note, rand))
				varied = True

				logger.debug(
					f"Repeat detected (replay count {self._phrase_memory.replay_count}): "
					f"{selected_note} -> {primary_note}"
				)

		# Record after variation so history reflects what actually played.
		self._phrase_memory.record(primary_note, velocity, timestamp)

		secondary_notes = contour.voice_relations.derive_all_voices(
			primary_note,
			self._previous_primary_note,
			self._config.voice_relations
		)

		self._previous_primary_note = primary_note

		return EngineOutput(
			primary_note = primary_note,
			primary_velocity = velocity,
			secondary_notes = tuple(secondary_notes),
			candidates = tuple(candidates),
			varied = varied
		)


	def update_config (self, partial: typing.Mapping[str, typing.Any]) -> ConstraintEngineConfig:

		"""Deep-merge ``partial`` into the configuration and return the new config.

		Session state (phrase history, previous note) is kept. A new phrase
		config takes effect on the existing memory.
		"""

		self._config = merge_config(self._config, partial)

		if self._phrase_memory.config != self._config.phrase:
			self._phrase_memory.configure(self._config.phrase)

		logger.debug(f"Engine config updated: {', '.join(sorted(partial))}")

		return self._config


	def get_config (self) -> ConstraintEngineConfig:

		"""Return the current configuration."""

		return self._config


	def reset (self) -> None:

		"""Clear phrase memory and the previous note. Configuration is unchanged."""

		self._phrase_memory.clear()
		self._previous_primary_note = None
