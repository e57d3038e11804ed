"""
Core domain models, mathematical primitives, and data contracts.

This module contains the foundational building blocks that are independent
of external systems (persistence, import, presentation).
"""
