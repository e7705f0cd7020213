"""Constants for Contour.

- ``contour.constants.velocity`` - MIDI velocity constants

The MIDI range constants live here because every note-producing function in
the pipeline clamps into them before returning.
"""

MIDI_NOTE_MIN = 0
MIDI_NOTE_MAX = 127

MIDI_CHANNEL_COUNT = 16

# C4 = 60, matching the MIDI Manufacturers Association convention.
MIDDLE_C = 60
