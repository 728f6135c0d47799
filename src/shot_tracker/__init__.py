"""
Basketball shot tracker: camera preview with a simulated shot counter.
"""

__version__ = "0.1.0"
