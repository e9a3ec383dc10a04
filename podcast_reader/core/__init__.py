"""Transcript synchronization engine.

WHY: The core package holds the only stateful logic in the reader:
turning a flat word list into pages and keeping the playback position,
the highlighted word, and the visible page consistent.

HOW: ir.py defines the data, word_store.py holds the loaded words,
chunker.py pages them, clock.py isolates the audio player, sync.py is
the state machine, and messaging.py carries typed messages between the
chat surface and the player. citations.py parses timestamped answers,
result.py holds the Ok/Err types used at the service boundary.

RULES:
- No I/O in this package
- Nothing here raises for malformed transcript data
"""
