"""Prediction Accountability Platform: claim records, claimant accuracy and sync."""

__version__ = "1.0.0"
