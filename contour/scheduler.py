"""Beat grid, quantization and swing in millisecond event time.

The helpers here are pure functions over a BPM grid: the grid tick is one
beat divided by ``subdivision`` (1 = quarter notes, 2 = eighths, 4 =
sixteenths). :class:`MusicalClock` is a cursor over that grid which turns
wall-clock time into discrete beat events, looking a little ahead so notes
can be chosen before they are due.

Timing is grid-quantized event time only, not audio-sample time.
"""

import dataclasses
import logging
import math
import typing

import contour.note_utils


logger = logging.getLogger(__name__)

MIN_BPM = 20
MAX_BPM = 300

MIN_SUBDIVISION = 1
MAX_SUBDIVISION = 8

MAX_SWING = 0.5


@dataclasses.dataclass(frozen=True)
class SchedulerConfig:

	"""
	Grid settings for the musical clock.

	Parameters:
		bpm: Beats per minute (clamped to 20-300 by the clock).
		subdivision: Grid ticks per beat (clamped to 1-8 by the clock).
		lookahead_ms: How far ahead of the current time ticks are emitted.
		swing_amount: 0.0 = straight, 0.5 = full shuffle on off-beat ticks.
	"""

	bpm: float = 120
	subdivision: int = 2
	lookahead_ms: float = 100
	swing_amount: float = 0.0


DEFAULT_SCHEDULER_CONFIG = SchedulerConfig()


@dataclasses.dataclass(frozen=True, order=True)
class BeatEvent:

	"""A grid tick due at ``beat_time`` (milliseconds, swing applied)."""

	beat_index: int
	beat_time: float


def tick_duration_ms (bpm: float, subdivision: int) -> float:

	"""Return the length of one grid tick in milliseconds."""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	if subdivision <= 0:
		raise ValueError("Subdivision must be positive")

	return 60000.0 / bpm / subdivision


def quantize (time_ms: float, bpm: float, subdivision: int, start_time_ms: float = 0.0) -> float:

	"""
	Snap a timestamp to the nearest grid position.

	Ties round up, so a time exactly halfway between two ticks moves to the
	later one.
	"""

	tick = tick_duration_ms(bpm, subdivision)
	tick_index = contour.note_utils.round_half_up((time_ms - start_time_ms) / tick)

	return start_time_ms + tick_index * tick


def next_grid_time (time_ms: float, bpm: float, subdivision: int, start_time_ms: float = 0.0) -> float:

	"""Return the first grid time at or after a timestamp."""

	tick = tick_duration_ms(bpm, subdivision)
	tick_index = math.ceil((time_ms - start_time_ms) / tick)

	return start_time_ms + tick_index * tick


def beat_index (time_ms: float, bpm: float, start_time_ms: float = 0.0) -> int:

	"""Return the 0-based beat (not tick) containing a timestamp."""

	beat_duration = tick_duration_ms(bpm, 1)

	return math.floor((time_ms - start_time_ms) / beat_duration)


def apply_swing (
	grid_time_ms: float,
	bpm: float,
	subdivision: int,
	swing_amount: float,
	start_time_ms: float = 0.0
) -> float:

	"""
	Delay off-beat ticks by a fraction of a tick.

	Only odd tick indices move; they are pushed later by
	``tick * swing_amount`` with the amount clamped to [0, 0.5]. Swing needs
	at least two ticks per beat, so quarter-note grids are left straight.
	"""

	if swing_amount <= 0 or subdivision < 2:
		return grid_time_ms

	tick = tick_duration_ms(bpm, subdivision)
	tick_index = contour.note_utils.round_half_up((grid_time_ms - start_time_ms) / tick)

	if tick_index % 2 == 1:
		return grid_time_ms + tick * contour.note_utils.clamp(swing_amount, 0.0, MAX_SWING)

	return grid_time_ms


class MusicalClock:

	"""
	A cursor over the beat grid, driven by calls to :meth:`advance`.

	The clock owns no timer. The caller passes the current time and receives
	every tick that has come within the lookahead window since the previous
	call. Each tick is delivered at most once, in increasing order, even if
	``advance`` is called with repeated or earlier times.
	"""

	def __init__ (self, config: SchedulerConfig = DEFAULT_SCHEDULER_CONFIG, start_time_ms: float = 0.0) -> None:

		"""
		Create a clock whose grid starts at ``start_time_ms``.

		Parameters:
			config: Grid settings. BPM, subdivision and swing are clamped to
				their supported ranges.
			start_time_ms: Origin of the grid (tick 0).
		"""

		self._config = dataclasses.replace(
			config,
			bpm = contour.note_utils.clamp(config.bpm, MIN_BPM, MAX_BPM),
			subdivision = int(contour.note_utils.clamp(config.subdivision, MIN_SUBDIVISION, MAX_SUBDIVISION)),
			swing_amount = contour.note_utils.clamp(config.swing_amount, 0.0, MAX_SWING)
		)

		self.start_time_ms = start_time_ms
		self.last_processed_tick = -1


	@property
	def config (self) -> SchedulerConfig:

		"""The current (clamped) grid settings."""

		return self._config


	def advance (self, current_time_ms: float) -> typing.List[BeatEvent]:

		"""Return the ticks that have entered the lookahead window since the last call."""

		tick = tick_duration_ms(self._config.bpm, self._config.subdivision)
		lookahead_time = current_time_ms + self._config.lookahead_ms
		current_tick = math.floor((lookahead_time - self.start_time_ms) / tick)

		events: typing.List[BeatEvent] = []

		for tick_index in range(self.last_processed_tick + 1, current_tick + 1):

			beat_time = apply_swing(
				self.start_time_ms + tick_index * tick,
				self._config.bpm,
				self._config.subdivision,
				self._config.swing_amount,
				self.start_time_ms
			)

			events.append(BeatEvent(beat_index=tick_index, beat_time=beat_time))

		# Never move backwards: an earlier time must not cause ticks to be re-emitted.
		self.last_processed_tick = max(self.last_processed_tick, current_tick)

		return events


	def set_bpm (self, bpm: float) -> None:

		"""Change the tempo, clamped to 20-300 BPM."""

		self._config = dataclasses.replace(self._config, bpm=contour.note_utils.clamp(bpm, MIN_BPM, MAX_BPM))

		logger.debug(f"Clock BPM set to {self._config.bpm:.2f}")


	def get_bpm (self) -> float:

		"""Return the current tempo."""

		return self._config.bpm


	def set_subdivision (self, subdivision: int) -> None:

		"""Change the grid resolution, clamped to 1-8 ticks per beat."""

		clamped = int(contour.note_utils.clamp(subdivision, MIN_SUBDIVISION, MAX_SUBDIVISION))
		self._config = dataclasses.replace(self._config, subdivision=clamped)


	def get_subdivision (self) -> int:

		"""Return the current ticks per beat."""

		return self._config.subdivision


	def set_swing (self, swing_amount: float) -> None:

		"""Change the swing amount, clamped to 0-0.5."""

		self._config = dataclasses.replace(self._config, swing_amount=contour.note_utils.clamp(swing_amount, 0.0, MAX_SWING))


	def reset (self, start_time_ms: float = 0.0) -> None:

		"""Move the grid origin and forget every processed tick."""

		self.start_time_ms = start_time_ms
		self.last_processed_tick = -1

		logger.debug(f"Clock reset to {start_time_ms:.1f} ms")
