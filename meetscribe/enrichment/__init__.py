"""
Enrichment module boundary for Meetscribe.

Design intent:
- Keep AI provider specifics behind one small async service contract.
- Own the single visible enrichment result and its pending/ready/failed states.
"""
