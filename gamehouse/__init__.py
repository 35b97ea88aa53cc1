"""
Game House Back Office
"""

__version__ = "1.0.0"
