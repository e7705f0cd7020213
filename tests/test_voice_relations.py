import unittest

import pytest

import contour.harmonic_gravity
import contour.voice_relations


VR = contour.voice_relations.VoiceRelation


class VoiceRelationTests (unittest.TestCase):

	"""
	Tests for deriving secondary voices.
	"""

	def test_parallel_adds_interval (self) -> None:

		"""
		A parallel fifth sits seven semitones above the primary.
		"""

		self.assertEqual(contour.voice_relations.derive_voice(60, None, VR("parallel", interval=7)), 67)
		self.assertEqual(contour.voice_relations.derive_voice(60, None, VR("parallel", interval=-12)), 48)


	def test_parallel_is_clamped (self) -> None:

		self.assertEqual(contour.voice_relations.derive_voice(125, None, VR("parallel", interval=7)), 127)
		self.assertEqual(contour.voice_relations.derive_voice(3, None, VR("parallel", interval=-7)), 0)


	def test_contrary_mirrors_around_anchor (self) -> None:

		"""
		Motion up from the anchor becomes motion down by the same amount.
		"""

		self.assertEqual(contour.voice_relations.derive_voice(64, None, VR("contrary")), 56)
		self.assertEqual(contour.voice_relations.derive_voice(64, None, VR("contrary", interval=12)), 68)
		self.assertEqual(contour.voice_relations.derive_voice(50, None, VR("contrary", anchor_note=48)), 46)


	def test_interval_follower_without_history (self) -> None:

		self.assertEqual(contour.voice_relations.derive_voice(72, None, VR("interval_follower", interval=3)), 75)


	def test_interval_follower_limits_step (self) -> None:

		"""
		A leap of an octave in the primary moves the follower by two semitones.
		"""

		self.assertEqual(contour.voice_relations.derive_voice(72, 60, VR("interval_follower", interval=3)), 65)
		self.assertEqual(contour.voice_relations.derive_voice(60, 72, VR("interval_follower")), 70)


	def test_interval_follower_small_motion_passes_through (self) -> None:

		self.assertEqual(contour.voice_relations.derive_voice(61, 60, VR("interval_follower")), 61)
		self.assertEqual(contour.voice_relations.derive_voice(58, 60, VR("interval_follower", interval=-5)), 53)


	def test_drone_is_constant (self) -> None:

		self.assertEqual(contour.voice_relations.derive_voice(90, 10, VR("drone", anchor_note=48)), 48)
		self.assertEqual(contour.voice_relations.derive_voice(30, None, VR("drone")), 60)


	def test_derive_all_voices_keeps_order (self) -> None:

		relations = [VR("parallel", interval=7), VR("drone", anchor_note=48), VR("contrary")]

		self.assertEqual(contour.voice_relations.derive_all_voices(64, None, relations), [71, 48, 56])
		self.assertEqual(contour.voice_relations.derive_all_voices(64, None, []), [])


def test_interval_follower_step_limited_relative_to_previous_primary () -> None:

	"""Relative to the previous note plus interval, the follower moves at most two semitones."""

	rng = contour.harmonic_gravity.SeededRandom(5)
	relation = VR("interval_follower", interval=4)

	for _ in range(500):
		previous = int(rng() * 100) + 10
		primary = int(rng() * 100) + 10
		follower = contour.voice_relations.derive_voice(primary, previous, relation)

		assert abs(follower - (previous + relation.interval)) <= 2


def test_drone_ignores_primary_and_history () -> None:

	relation = VR("drone", anchor_note=36)

	for primary in range(0, 128, 7):
		for previous in (None, 0, 64, 127):
			assert contour.voice_relations.derive_voice(primary, previous, relation) == 36


def test_all_derived_notes_in_midi_range () -> None:

	relations = [
		VR("parallel", interval=24),
		VR("parallel", interval=-24),
		VR("contrary", interval=0, anchor_note=0),
		VR("contrary", interval=0, anchor_note=127),
		VR("interval_follower", interval=30),
		VR("drone", anchor_note=200),
	]

	for primary in range(128):
		for note in contour.voice_relations.derive_all_voices(primary, 127 - primary, relations):
			assert 0 <= note <= 127


@pytest.mark.parametrize("a, b, expected", [
	(60, 60, True),
	(60, 63, True),
	(60, 64, True),
	(60, 65, True),
	(60, 67, True),
	(60, 68, True),
	(60, 69, True),
	(60, 72, True),
	(67, 60, True),
	(60, 61, False),
	(60, 62, False),
	(60, 66, False),
	(60, 70, False),
	(60, 71, False),
])
def test_is_consonant (a: int, b: int, expected: bool) -> None:

	assert contour.voice_relations.is_consonant(a, b) is expected


def test_unknown_relation_type_rejected () -> None:

	with pytest.raises(ValueError, match="sideways"):
		VR("sideways")


def test_relation_from_dict () -> None:

	relation = VR.from_dict({"type": "contrary", "interval": "5", "anchor_note": 48})

	assert relation == VR("contrary", interval=5, anchor_note=48)
	assert VR.from_dict({"type": "drone"}).anchor == 60


def test_relation_from_dict_requires_type () -> None:

	with pytest.raises(ValueError):
		VR.from_dict({"interval": 7})


def test_default_relations () -> None:

	"""The default voicing is a parallel fifth, a mirror around C4 and a C4 drone."""

	assert [relation.type for relation in contour.voice_relations.DEFAULT_RELATIONS] == ["parallel", "contrary", "drone"]
	assert contour.voice_relations.derive_all_voices(64, None, contour.voice_relations.DEFAULT_RELATIONS) == [71, 56, 60]
