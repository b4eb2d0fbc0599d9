"""Slot Scheduler — executive/owner booking calendar with a periodic sweep."""
