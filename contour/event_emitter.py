"""Listener registry for the performer's note and beat events.

Three events are published, each with fixed arguments:

- ``"note_on"`` ``(voice_id, note, velocity)``
- ``"note_off"`` ``(voice_id, note)``
- ``"beat"`` ``(BeatEvent)``

Renderers and synths subscribe here without the pipeline knowing about them.
Delivery is synchronous, in registration order, on the caller's thread, so a
listener sees every note in the order it was played.
"""

import inspect
import typing


NOTE_ON = "note_on"
NOTE_OFF = "note_off"
BEAT = "beat"

EVENT_NAMES: typing.Tuple[str, ...] = (NOTE_ON, NOTE_OFF, BEAT)

Listener = typing.Callable[..., typing.Any]


class EventEmitter:

	"""Calls registered listeners when the performer plays, stops or ticks."""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[Listener]] = {name: [] for name in EVENT_NAMES}


	def on (self, event_name: str, listener: Listener) -> None:

		"""
		Subscribe a listener to one event.

		Raises ``ValueError`` for an unknown event name, or for a coroutine
		function, which could never be awaited from the synchronous pipeline.
		"""

		self._check_event_name(event_name)

		if inspect.iscoroutinefunction(listener):
			raise ValueError(f"Listener for {event_name!r} must be a plain function, not a coroutine function")

		self._listeners[event_name].append(listener)


	def off (self, event_name: str, listener: Listener) -> None:

		"""Unsubscribe a listener. Raises ``ValueError`` if it was not subscribed."""

		self._check_event_name(event_name)

		if listener not in self._listeners[event_name]:
			raise ValueError(f"Listener not registered for event {event_name!r}")

		self._listeners[event_name].remove(listener)


	def listener_count (self, event_name: str) -> int:

		"""Number of listeners subscribed to an event."""

		self._check_event_name(event_name)

		return len(self._listeners[event_name])


	def emit (self, event_name: str, *args: typing.Any) -> None:

		"""Call every listener of an event with ``args``."""

		self._check_event_name(event_name)

		# Copy so a listener may unsubscribe itself while being called.
		for listener in list(self._listeners[event_name]):
			listener(*args)


	@staticmethod
	def _check_event_name (event_name: str) -> None:

		if event_name not in EVENT_NAMES:
			raise ValueError(f"Unknown event {event_name!r}. Expected one of {', '.join(EVENT_NAMES)}")
