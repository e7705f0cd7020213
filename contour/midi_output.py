"""MIDI output for generated notes, via mido.

:class:`MidiOutput` is an explicitly constructed adapter: the performer (or
any other consumer) is handed one and owns it. When no port could be opened
every send is a silent no-op, so the pipeline runs the same with or without
hardware attached.
"""

import logging
import typing

import mido

import contour.constants


logger = logging.getLogger(__name__)

# Controller numbers for "All Sound Off" and "All Notes Off".
_CC_ALL_SOUND_OFF = 120
_CC_ALL_NOTES_OFF = 123


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Select and open a MIDI output port.

	If ``device_name`` is given, that port is opened. Otherwise the first
	available port is used, and the alternatives are logged so the name can be
	passed explicitly next time.

	Returns:
		A tuple of ``(device_name, port)``, or ``(None, None)`` on failure.
	"""

	try:
		outputs = mido.get_output_names()
		logger.info(f"Available MIDI outputs: {outputs}")

		if not outputs:
			logger.error("No MIDI output devices found.")
			return None, None

		if device_name is not None:

			if device_name not in outputs:
				logger.error(
					f"MIDI output device '{device_name}' not found. "
					f"Available devices: {outputs}"
				)
				return None, None

			port = mido.open_output(device_name)
			logger.info(f"Opened MIDI output: {device_name}")
			return device_name, port

		selected_name = outputs[0]
		port = mido.open_output(selected_name)

		if len(outputs) > 1:
			logger.info(f"Several MIDI outputs found - using '{selected_name}'. Pass a device name to choose another.")

		else:
			logger.info(f"One MIDI output found - using '{selected_name}'")

		return selected_name, port

	except Exception as e:
		logger.error(f"Failed to open MIDI output: {e}")
		return None, None


class MidiOutput:

	"""Sends note-on/note-off messages to one MIDI port."""

	def __init__ (self, channel: int = 0) -> None:

		"""
		Create a disconnected output.

		Parameters:
			channel: Default MIDI channel (0-15) for notes sent without one.
		"""

		self.channel = channel
		self.device_name: typing.Optional[str] = None
		self._port: typing.Optional[typing.Any] = None


	@property
	def available (self) -> bool:

		"""True once a port has been opened."""

		return self._port is not None


	def connect (self, device_name: typing.Optional[str] = None) -> bool:

		"""Open a port (see :func:`select_output_device`). Returns True on success."""

		self.close()

		self.device_name, self._port = select_output_device(device_name)

		return self._port is not None


	def note_on (self, note: int, velocity: int, channel: typing.Optional[int] = None) -> None:

		"""Send a note-on. Data bytes are masked to 7 bits, the channel to 4."""

		self._send('note_on', note, velocity, channel)


	def note_off (self, note: int, channel: typing.Optional[int] = None) -> None:

		"""Send a note-off with zero release velocity."""

		self._send('note_off', note, 0, channel)


	def panic (self) -> None:

		"""Silence every note on every channel."""

		if self._port is None:
			return

		logger.info("Panic: sending all notes off.")

		try:

			for channel in range(contour.constants.MIDI_CHANNEL_COUNT):
				self._port.send(mido.Message('control_change', channel=channel, control=_CC_ALL_NOTES_OFF, value=0))
				self._port.send(mido.Message('control_change', channel=channel, control=_CC_ALL_SOUND_OFF, value=0))

			self._port.panic()

		except Exception:
			logger.exception("MIDI panic failed (device may be disconnected)")


	def close (self) -> None:

		"""Close the port, if open."""

		if self._port is None:
			return

		try:
			self._port.close()

		except Exception:
			logger.exception("Failed to close MIDI output")

		finally:
			self._port = None
			self.device_name = None


	def _send (self, message_type: str, note: int, velocity: int, channel: typing.Optional[int]) -> None:

		"""Build and send one note message, ignoring the call when disconnected."""

		if self._port is None:
			return

		channel = self.channel if channel is None else channel

		try:
			self._port.send(mido.Message(
				message_type,
				channel = channel & 0x0F,
				note = note & 0x7F,
				velocity = velocity & 0x7F
			))

		except Exception:
			logger.exception(f"Failed to send MIDI {message_type} message")
