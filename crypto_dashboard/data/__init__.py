"""
Data I/O, schema enforcement, and candle CSV contract management.

Handles loading exchange candle exports and writing indicator series and
summary tables with strict schema validation and ordering requirements.
"""
