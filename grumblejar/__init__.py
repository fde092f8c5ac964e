"""
GrumbleJar - Personal Irritant Savings Ledger

Turn the small annoyances of a day into points,
and spend those points on rewards you chose yourself.

Every tap is reversible for a few seconds. Then it counts.
"""

__version__ = "0.1.0"
