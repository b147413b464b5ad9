"""
Tests Module
============

Unit tests and integration tests for the allocation backtester.

Test Categories:
- unit/: Schedule, lookback, momentum, weighting, overlay, simulator, statistics
- integration/: Full backtests and sweeps
"""
