"""
queuewise - appointment slots and walk-in queue estimates for service providers.
"""

__version__ = "0.1.0"
