import typing

import mido
import pytest


class FakeMidiOut:

	"""MIDI output stub that records every message it is sent."""

	def __init__ (self, name: str) -> None:

		"""Start with an empty message log."""

		self.name = name
		self.sent: typing.List[mido.Message] = []
		self.closed = False
		self.panicked = False


	def send (self, message: mido.Message) -> None:

		"""Keep the message for later assertions."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


	def panic (self) -> None:

		"""Remember that a panic was requested."""

		self.panicked = True


	def reset (self) -> None:

		"""No-op reset for the fake device."""

		return None


class FakeMidi:

	"""Stand-in for mido's port functions, tracking every port opened."""

	def __init__ (self) -> None:

		self.output_names: typing.List[str] = ["Dummy MIDI", "Second Dummy"]
		self.opened: typing.List[FakeMidiOut] = []


	def get_output_names (self) -> typing.List[str]:

		"""Return the configured list of MIDI output names."""

		return list(self.output_names)


	def open_output (self, name: str) -> FakeMidiOut:

		"""Return a new fake output for the name."""

		port = FakeMidiOut(name)
		self.opened.append(port)
		return port


	@property
	def last_port (self) -> FakeMidiOut:

		"""The most recently opened fake output."""

		return self.opened[-1]


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> FakeMidi:

	"""Patch mido to use fake MIDI outputs for tests that need them."""

	fake = FakeMidi()

	monkeypatch.setattr(mido, "get_output_names", fake.get_output_names)
	monkeypatch.setattr(mido, "open_output", fake.open_output)

	return fake
