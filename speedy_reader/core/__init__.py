"""Core RSVP engine: tokenizer, pivot resolver, duration model, scheduler.

WHY: The core package contains the only algorithmic part of the reader —
everything else is a surface around it. These modules must stay free of
I/O so every surface (CLI, GUI, HTTP API) can share them.

HOW: tokenizer.py splits text into display tokens, pivot.py finds the
optimal recognition point, timing.py prices each token in milliseconds,
ir.py holds the precomputed timeline, scheduler.py drives live playback,
session.py couples the text with the transform collaborator.

RULES:
- No direct network or file access; session.py reaches the network only
  through its injected client factory
- Pivot splits are recomputed on demand, never stored in playback state
"""
