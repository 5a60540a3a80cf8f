"""
Neura Client
Financial health analytics core for the Neura dashboard.
"""

__version__ = "1.0.0"
