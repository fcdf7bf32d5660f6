"""
Configuration loading and validation for dashboard settings.

Provides strongly typed settings objects for paths, markets, indicator
periods and annualization, loaded from environment variables with upfront
validation.
"""
