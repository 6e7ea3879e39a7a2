"""
Sponsor Watch - Scheduled sponsored-content reports for YouTube channels

This package periodically scans a set of YouTube channels for sponsored
videos published within a rolling window and emails a CSV report to the
subscribers of each schedule.
"""

__version__ = "1.0.0"
__author__ = "Sponsor Watch Contributors"
