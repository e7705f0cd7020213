"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). Pointer gestures carry a
velocity straight through the pipeline to the note-on message.
"""

DEFAULT_VELOCITY = 100
