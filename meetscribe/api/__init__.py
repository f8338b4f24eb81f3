"""
HTTP API for Meetscribe.
"""
