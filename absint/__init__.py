"""absint — Sign-domain abstract interpreter for a toy imperative language"""

__version__ = "0.1.0"
