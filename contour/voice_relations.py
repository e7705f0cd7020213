"""Secondary voices derived from the primary note by contrapuntal relationships.

Each :class:`VoiceRelation` turns the primary note (and, for motion-aware
relations, the previous primary note) into one secondary note:

- ``parallel``: moves with the primary at a fixed interval.
- ``contrary``: mirrors the primary about an anchor note, so the two voices
  move in opposite directions.
- ``interval_follower``: follows at an interval but never moves more than two
  semitones per step, turning leaps in the primary into stepwise motion.
- ``drone``: holds the anchor note regardless of the primary.

Derivation is pure; the caller owns the previous primary note.
"""

import dataclasses
import typing

import contour.constants
import contour.note_utils


PARALLEL = "parallel"
CONTRARY = "contrary"
INTERVAL_FOLLOWER = "interval_follower"
DRONE = "drone"

RELATION_TYPES: typing.Tuple[str, ...] = (PARALLEL, CONTRARY, INTERVAL_FOLLOWER, DRONE)

DEFAULT_ANCHOR_NOTE = contour.constants.MIDDLE_C

# Largest step an interval follower may take between consecutive notes.
MAX_FOLLOWER_STEP = 2

# Interval residues (mod 12) heard as consonant: unison, thirds, fourth, fifth, sixths.
CONSONANT_INTERVALS: typing.FrozenSet[int] = frozenset({0, 3, 4, 5, 7, 8, 9})


@dataclasses.dataclass(frozen=True)
class VoiceRelation:

	"""
	A rule deriving one secondary note from the primary note.

	Parameters:
		type: One of ``"parallel"``, ``"contrary"``, ``"interval_follower"``
			or ``"drone"``.
		interval: Offset in semitones (positive = up).
		anchor_note: Reference note for contrary motion and drones. Defaults
			to middle C when omitted.
	"""

	type: str
	interval: int = 0
	anchor_note: typing.Optional[int] = None

	def __post_init__ (self) -> None:
		if self.type not in RELATION_TYPES:
			raise ValueError(
				f"Unknown voice relation type: {self.type!r}. Expected one of {', '.join(RELATION_TYPES)}"
			)


	@property
	def anchor (self) -> int:

		"""The anchor note, falling back to middle C."""

		return self.anchor_note if self.anchor_note is not None else DEFAULT_ANCHOR_NOTE


	@classmethod
	def from_dict (cls, data: typing.Mapping[str, typing.Any]) -> "VoiceRelation":

		"""Build a relation from a plain mapping, e.g. one entry of a YAML list."""

		if "type" not in data:
			raise ValueError("Voice relation requires a 'type'")

		anchor_note = data.get("anchor_note")

		return cls(
			type = data["type"],
			interval = int(data.get("interval", 0)),
			anchor_note = int(anchor_note) if anchor_note is not None else None
		)


DEFAULT_RELATIONS: typing.Tuple[VoiceRelation, ...] = (
	VoiceRelation(PARALLEL, interval=7),
	VoiceRelation(CONTRARY, interval=0, anchor_note=60),
	VoiceRelation(DRONE, interval=0, anchor_note=60),
)


def derive_voice (
	primary_note: int,
	previous_primary_note: typing.Optional[int],
	relation: VoiceRelation
) -> int:

	"""Derive one secondary note from the primary note, clamped to 0-127.

	Parameters:
		primary_note: Current primary note.
		previous_primary_note: The primary note before this one, or None at
			the start of a phrase. Only ``interval_follower`` uses it.
		relation: The rule to apply.

	Example:
		```python
		derive_voice(64, None, VoiceRelation("contrary", anchor_note=60))   # 56
		derive_voice(72, 60, VoiceRelation("interval_follower", interval=3))   # 65
		```
	"""

	if relation.type == PARALLEL:
		result = primary_note + relation.interval

	elif relation.type == CONTRARY:
		anchor = relation.anchor
		result = anchor - (primary_note - anchor) + relation.interval

	elif relation.type == INTERVAL_FOLLOWER:

		if previous_primary_note is None:
			result = primary_note + relation.interval

		else:
			primary_motion = primary_note - previous_primary_note
			step = int(contour.note_utils.clamp(primary_motion, -MAX_FOLLOWER_STEP, MAX_FOLLOWER_STEP))
			result = previous_primary_note + relation.interval + step

	elif relation.type == DRONE:
		result = relation.anchor

	else:
		raise ValueError(f"Unknown voice relation type: {relation.type!r}")

	return contour.note_utils.clamp_note(result)


def derive_all_voices (
	primary_note: int,
	previous_primary_note: typing.Optional[int],
	relations: typing.Sequence[VoiceRelation]
) -> typing.List[int]:

	"""Derive one secondary note per relation, in relation order."""

	return [derive_voice(primary_note, previous_primary_note, relation) for relation in relations]


def is_consonant (note_a: int, note_b: int) -> bool:

	"""Return True if the interval between two notes is consonant (octave-equivalent)."""

	return abs(note_a - note_b) % 12 in CONSONANT_INTERVALS
