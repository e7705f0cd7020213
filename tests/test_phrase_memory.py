"""Tests for PhraseMemory: bounded history, interval patterns, repeat detection and variation."""

import random

import pytest

import contour.phrase_memory


def _memory (
	max_length: int = 16,
	variation_amount: float = 2,
	similarity_threshold: float = 0.85,
) -> contour.phrase_memory.PhraseMemory:

	"""Create a PhraseMemory with test defaults."""

	return contour.phrase_memory.PhraseMemory(contour.phrase_memory.PhraseMemoryConfig(
		max_length=max_length,
		variation_amount=variation_amount,
		similarity_threshold=similarity_threshold,
	))


def _record_notes (memory: contour.phrase_memory.PhraseMemory, notes: list) -> None:

	for index, note in enumerate(notes):
		memory.record(note, 100, float(index))


def _build_replays (memory: contour.phrase_memory.PhraseMemory, count: int) -> None:

	"""Drive the replay counter up by matching the stored pattern ``count`` times."""

	pattern = memory.get_interval_pattern()

	for _ in range(count):
		assert memory.check_and_evolve(pattern)


class TestHistory:

	def test_empty_memory (self) -> None:

		memory = _memory()

		assert len(memory) == 0
		assert memory.get_last_note() is None
		assert memory.get_interval_pattern() == []
		assert memory.get_phrase() == []


	def test_single_event_has_no_intervals (self) -> None:

		memory = _memory()
		memory.record(60, 100, 0.0)

		assert memory.get_last_note() == 60
		assert memory.get_interval_pattern() == []


	def test_interval_pattern (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 64, 67, 60])

		assert memory.get_interval_pattern() == [4, 3, -7]


	def test_oldest_event_is_evicted (self) -> None:

		"""History never exceeds max_length; the oldest goes first."""

		memory = _memory(max_length=3)
		_record_notes(memory, [60, 62, 64, 65, 67])

		assert len(memory) == 3
		assert [event.note for event in memory.get_phrase()] == [64, 65, 67]


	def test_events_keep_velocity_and_timestamp (self) -> None:

		memory = _memory()
		memory.record(72, 88, 1234.5)

		event = memory.get_phrase()[0]

		assert event == contour.phrase_memory.PhraseEvent(note=72, velocity=88, timestamp=1234.5)


	def test_get_phrase_returns_a_copy (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 62])

		phrase = memory.get_phrase()
		phrase.clear()

		assert len(memory) == 2


	def test_clear (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 2)

		memory.clear()

		assert len(memory) == 0
		assert memory.replay_count == 0


	def test_configure_trims_history (self) -> None:

		"""A shorter max_length drops the oldest events immediately."""

		memory = _memory(max_length=8)
		_record_notes(memory, [60, 62, 64, 65, 67])

		memory.configure(contour.phrase_memory.PhraseMemoryConfig(max_length=2))

		assert [event.note for event in memory.get_phrase()] == [65, 67]


	def test_invalid_max_length_rejected (self) -> None:

		with pytest.raises(ValueError):
			contour.phrase_memory.PhraseMemoryConfig(max_length=0)


class TestSimilarity:

	def test_identical_patterns (self) -> None:

		assert contour.phrase_memory.PhraseMemory.similarity([2, 2, -4], [2, 2, -4]) == 1.0


	def test_positional_comparison (self) -> None:

		"""A shifted pattern does not count as similar."""

		assert contour.phrase_memory.PhraseMemory.similarity([1, 2, 3], [2, 3, 1]) == 0.0


	def test_partial_match (self) -> None:

		assert contour.phrase_memory.PhraseMemory.similarity([1, 2, 3, 4], [1, 2, 0, 0]) == 0.5


	def test_shorter_length_is_used (self) -> None:

		assert contour.phrase_memory.PhraseMemory.similarity([1, 2], [1, 2, 9, 9]) == 1.0


	def test_empty_pattern_is_unrelated (self) -> None:

		assert contour.phrase_memory.PhraseMemory.similarity([], [1, 2]) == 0.0
		assert contour.phrase_memory.PhraseMemory.similarity([1, 2], []) == 0.0


class TestRepeatDetection:

	def test_match_increments_replay_count (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])

		assert memory.check_and_evolve([2, 2, 1]) is True
		assert memory.replay_count == 1


	def test_novelty_decays_rather_than_resets (self) -> None:

		"""One new gesture after two repeats leaves one repeat remembered."""

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 2)

		assert memory.check_and_evolve([-5, 7, 0]) is False
		assert memory.replay_count == 1


	def test_replay_count_never_negative (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])

		memory.check_and_evolve([9, 9, 9])
		memory.check_and_evolve([9, 9, 9])

		assert memory.replay_count == 0


	def test_threshold_controls_detection (self) -> None:

		"""Two of three intervals matching is enough at 0.6 but not at 0.85."""

		strict = _memory(similarity_threshold=0.85)
		loose = _memory(similarity_threshold=0.6)
		_record_notes(strict, [60, 62, 64, 65])
		_record_notes(loose, [60, 62, 64, 65])

		assert strict.check_and_evolve([2, 2, 5]) is False
		assert loose.check_and_evolve([2, 2, 5]) is True


class TestVariation:

	def test_no_variation_without_replays (self) -> None:

		memory = _memory()

		for rand in (0.0, 0.5, 0.99):
			assert memory.apply_variation(64, rand) == 64


	def test_variation_amount_zero_disables_variation (self) -> None:

		memory = _memory(variation_amount=0)
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 4)

		assert memory.apply_variation(64, 0.0) == 64


	def test_first_replay_shifts_by_one_at_most (self) -> None:

		"""With one replay the scale is 1/4, so amount 2 gives a maximum shift of 1."""

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 1)

		assert memory.apply_variation(60, 0.0) == 59
		assert memory.apply_variation(60, 0.5) == 60
		assert memory.apply_variation(60, 0.99) == 61


	def test_saturated_variation_bounds (self) -> None:

		"""Four or more replays allow the full variation amount and no more."""

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 6)

		assert memory.apply_variation(60, 0.0) == 58
		assert memory.apply_variation(60, 0.999) == 62

		for step in range(100):
			assert 58 <= memory.apply_variation(60, step / 100) <= 62


	def test_variation_is_clamped_to_midi_range (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 4)

		assert memory.apply_variation(0, 0.0) == 0
		assert memory.apply_variation(127, 0.999) == 127


	def test_variation_without_rand_stays_in_bounds (self) -> None:

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 4)

		for _ in range(50):
			assert 62 <= memory.apply_variation(64) <= 66


	def test_rng_supplies_the_draw_when_rand_omitted (self) -> None:

		"""An injected generator is used when no explicit draw is given."""

		memory = _memory()
		_record_notes(memory, [60, 62, 64, 65])
		_build_replays(memory, 4)

		expected = memory.apply_variation(64, random.Random(21).random())

		assert memory.apply_variation(64, rng=random.Random(21)) == expected
