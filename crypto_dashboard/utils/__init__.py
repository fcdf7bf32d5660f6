"""
Generic utility functions shared across modules.

Currently the epoch-millisecond timestamp conversions used by the CSV layer.
"""
