"""
Sign Shop Manager Package

Back office for a print and signage shop: clients, materials, inks and
service orders, priced by a snapshot-based job costing engine.
"""

__version__ = "1.0.0"
