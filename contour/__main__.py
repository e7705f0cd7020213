"""Play a looping circular gesture through the pipeline.

Usage::

	python -m contour --config contour.yaml --steps 32 --seed 7
	python -m contour --dry-run

The gesture circles the tonal field once every eight ticks; each lap offers
the phrase memory a recurring shape to recognise and vary. Settings
are read from an optional YAML file with the sections ``tonal_field``,
``gravity``, ``phrase``, ``voice_relations``, ``scheduler`` and ``midi``.
"""

import argparse
import logging
import math
import os
import time
import typing

import yaml

import contour.constraint_engine
import contour.harmonic_gravity
import contour.mapping
import contour.midi_output
import contour.performer
import contour.scheduler
import contour.voice_relations


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

GESTURE_PERIOD = 8
GESTURE_RADIUS = 0.4

# How often the real-time loop polls the clock.
POLL_INTERVAL_SECONDS = 0.005


def load_config (config_path: str = 'contour.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		config = yaml.safe_load(f) or {}

	if not isinstance(config, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping of sections")

	return config


def build_engine_config (config: typing.Mapping[str, typing.Any]) -> contour.constraint_engine.ConstraintEngineConfig:

	"""Merge the pipeline sections of a loaded config onto the defaults (engine enabled)."""

	partial: typing.Dict[str, typing.Any] = {"enabled": True}

	# An empty section (every value commented out) loads as None and means "defaults".
	for key in ("tonal_field", "gravity", "phrase", "voice_relations"):
		if config.get(key) is not None:
			partial[key] = config[key]

	if "voice_relations" not in partial:
		partial["voice_relations"] = contour.voice_relations.DEFAULT_RELATIONS

	return contour.constraint_engine.merge_config(contour.constraint_engine.DEFAULT_CONSTRAINT_CONFIG, partial)


def build_scheduler_config (config: typing.Mapping[str, typing.Any], bpm: typing.Optional[float]) -> contour.scheduler.SchedulerConfig:

	"""Build the clock settings, letting the command-line BPM win over the file."""

	section = dict(config.get('scheduler') or {})

	if bpm is not None:
		section['bpm'] = bpm

	return contour.scheduler.SchedulerConfig(**section)


def gesture_position (index: int) -> typing.Tuple[float, float]:

	"""Position on a circle around the centre of the field, one lap per period."""

	angle = 2 * math.pi * (index % GESTURE_PERIOD) / GESTURE_PERIOD

	return (
		0.5 + GESTURE_RADIUS * math.cos(angle),
		0.5 + GESTURE_RADIUS * math.sin(angle),
	)


def perform (
	performer: contour.performer.Performer,
	steps: int,
	rng: contour.harmonic_gravity.SeededRandom,
	realtime: bool = True
) -> typing.List[contour.constraint_engine.EngineOutput]:

	"""
	Play ``steps`` grid ticks of the gesture and return what was played.

	In real time each tick waits until its (swung) beat time. Otherwise time is
	simulated and the run completes immediately.
	"""

	if performer.clock is None:
		raise ValueError("perform() needs a performer with a clock")

	config = performer.clock.config
	simulated_step_ms = contour.scheduler.tick_duration_ms(config.bpm, config.subdivision) / 2
	start = time.monotonic()
	now_ms = 0.0
	outputs: typing.List[contour.constraint_engine.EngineOutput] = []

	while len(outputs) < steps:

		for event in performer.tick(now_ms):

			if len(outputs) >= steps:
				break

			if realtime:
				delay = event.beat_time / 1000.0 - (time.monotonic() - start)
				if delay > 0:
					time.sleep(delay)

			nx, ny = gesture_position(event.beat_index)
			output = performer.gesture(0, nx, ny, rand=rng(), timestamp=event.beat_time)
			outputs.append(output)

			secondary = " ".join(contour.mapping.midi_note_to_name(note) for note in output.secondary_notes)
			logger.info(
				f"Tick {event.beat_index:3d}: {contour.mapping.midi_note_to_name(output.primary_note):4s}"
				f"{' (varied)' if output.varied else '         '}  [{secondary}]"
			)

		if realtime:
			time.sleep(POLL_INTERVAL_SECONDS)
			now_ms = (time.monotonic() - start) * 1000.0

		else:
			now_ms += simulated_step_ms

	return outputs


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Main entry point for the contour application.
	"""

	parser = argparse.ArgumentParser(prog="contour", description="Play a gesture through the contour note pipeline.")
	parser.add_argument("--config", default="contour.yaml", help="YAML settings file (optional)")
	parser.add_argument("--seed", type=int, default=1, help="Seed for reproducible note choices")
	parser.add_argument("--steps", type=int, default=32, help="Number of grid ticks to play")
	parser.add_argument("--device", default=None, help="MIDI output device name")
	parser.add_argument("--bpm", type=float, default=None, help="Tempo (overrides the config file)")
	parser.add_argument("--dry-run", action="store_true", help="No MIDI output and no waiting; just log the notes")
	args = parser.parse_args(argv)

	logger.info("Contour starting...")

	config = load_config(args.config)

	engine = contour.constraint_engine.ConstraintEngine(build_engine_config(config))
	clock = contour.scheduler.MusicalClock(build_scheduler_config(config, args.bpm))

	midi_config = config.get('midi') or {}
	midi_out: typing.Optional[contour.midi_output.MidiOutput] = None

	if not args.dry_run:
		midi_out = contour.midi_output.MidiOutput(channel=midi_config.get('channel', 0))
		device_name = args.device or midi_config.get('device_name')

		if not midi_out.connect(device_name):
			logger.warning("No MIDI output available - notes will only be logged.")

	performer = contour.performer.Performer(engine, midi_out=midi_out, clock=clock)

	try:
		perform(performer, args.steps, contour.harmonic_gravity.SeededRandom(args.seed), realtime=not args.dry_run)

	except KeyboardInterrupt:
		logger.info("Stopping...")

	finally:
		performer.stop_all()

		if midi_out is not None:
			midi_out.close()


if __name__ == "__main__":
	main()
