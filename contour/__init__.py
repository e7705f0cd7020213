"""
Contour - gesture-driven note generation for Python.

Contour maps a continuous 2D pointer position to musical notes that are
deterministic, harmonically coherent, and alive under repetition. A single
pipeline turns each input sample into a primary note plus contrapuntal
secondary voices:

    position -> tonal field -> harmonic gravity -> phrase variation -> voice relations

What it does:

- **Tonal field.** The horizontal axis widens the harmonic palette from root
  and fifth to the full chromatic set, ordered by stability. The vertical
  axis moves the register. Nearby positions give related notes.
- **Harmonic gravity.** One candidate is chosen by weighted probability,
  pulled toward stable tones by an adjustable strength.
- **Phrase memory.** Recent notes are remembered as an interval shape.
  Repeated gestures are recognised and varied by a bounded, growing offset,
  so loops evolve instead of replaying verbatim.
- **Voice relations.** Parallel, contrary, interval-follower and drone
  voices derived from the primary note.
- **Musical clock.** BPM grid, quantization, swing, and a lookahead cursor
  delivering each tick exactly once.
- **Deterministic.** Every random choice takes an explicit value in
  [0, 1). ``SeededRandom`` gives reproducible sequences, so a gesture can be
  replayed bit for bit.

Output:

- ``Performer`` wires the engine to a ``VoiceAllocator`` (polyphony and voice
  stealing), an optional ``MidiOutput`` (mido) and an ``EventEmitter`` for
  any other listener. Nothing is global; every object is constructed and
  passed in explicitly.

Minimal example:

    ```python
    import contour

    engine = contour.ConstraintEngine({
        "enabled": True,
        "voice_relations": [{"type": "parallel", "interval": 7}],
    })
    rng = contour.SeededRandom(42)

    output = engine.process(0.3, 0.6, velocity=100, rand=rng())
    print(output.primary_note, output.secondary_notes)
    ```

Command line: ``python -m contour --dry-run`` plays a looping gesture and
logs the notes.

Package-level exports: ``ConstraintEngine``, ``ConstraintEngineConfig``,
``MusicalClock``, ``Performer``, ``PhraseMemory``, ``SeededRandom``,
``VoiceRelation``.
"""

import contour.constraint_engine
import contour.harmonic_gravity
import contour.performer
import contour.phrase_memory
import contour.scheduler
import contour.voice_relations


ConstraintEngine = contour.constraint_engine.ConstraintEngine
ConstraintEngineConfig = contour.constraint_engine.ConstraintEngineConfig
MusicalClock = contour.scheduler.MusicalClock
Performer = contour.performer.Performer
PhraseMemory = contour.phrase_memory.PhraseMemory
SeededRandom = contour.harmonic_gravity.SeededRandom
VoiceRelation = contour.voice_relations.VoiceRelation
