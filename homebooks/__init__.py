"""
Homebooks - Source Package

Persistence and derived-statistics layer for two household tools:
an invoice creator/tracker and a family wealth tracker.

DESIGN PRINCIPLES:
1. Every write rewrites the whole collection
2. Statistics are derived at read time, never stored
3. Validate before touching storage
4. Every mutation is auditable
5. Backing store is swappable
"""

__version__ = "1.0.0"
__author__ = "Homebooks Team"
