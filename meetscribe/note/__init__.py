"""
Note module boundary for Meetscribe.

Design intent:
- Own the editable note and its persistence commands.
- Mirror the user's stored notes as a read-only, store-ordered snapshot.
"""
