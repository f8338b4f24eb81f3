"""
Meetscribe package.

Design intent:
- Host the live dictation and note synchronization controller.
- Keep domain modules (dictation/note/enrichment) independent from any UI.
"""
