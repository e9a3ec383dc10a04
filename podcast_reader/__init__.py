"""Podcast Reader: RSS episodes, synced transcripts, and transcript Q&A.

WHY: Listening to a podcast and reading along requires three things the
feed alone does not provide: a word-timed transcript, a view of that
transcript that follows the audio, and a way to jump to the moments an
assistant cites when answering questions about the episode.

HOW: Three layers:
  api/     HTTP clients for the RSS, transcription, and chat services
  core/    the transcript synchronization engine (word store, chunker,
           playback clock adapter, sync controller, message bus)
  server/  FastAPI routes exposing the clients to a UI
session.py wires one controller, one message bus, and the chat panel
together for a listening session.

RULES:
- The core never performs I/O and never raises for malformed input
- Upstream failures are typed exceptions in api/, converted to Err
  results at the session boundary
"""

__version__ = "0.1.0"
