"""
apibench: check the speed and resilience of an HTTP endpoint.

Fires a number of timed requests at one URL, one after another or all at
once, and reduces them to latency statistics with optional pass/fail checks.
"""

__version__ = "1.0.0"
