"""
Dictation module boundary for Meetscribe.

Design intent:
- Wrap a platform speech engine behind a small state machine.
- Commit only finalized recognition text into the editor transcript.
"""
