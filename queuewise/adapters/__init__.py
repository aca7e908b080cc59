"""
Adapters layer - Data store integrations.
"""

from .json_store import SAMPLE_DATA_FILE, JsonBookingStore

__all__ = ["JsonBookingStore", "SAMPLE_DATA_FILE"]
