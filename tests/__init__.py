"""
Test suite for snaptrack

Contains:
- tests/unit/          : Unit tests for individual modules
"""
