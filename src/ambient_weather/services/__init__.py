"""
Shared service utilities.

- http.py - requests session with bounded retry/backoff (the transport)
"""
