"""
Note tree ordering service.
Keeps a manual display order for notes on top of a plain folder hierarchy.
"""
__version__ = "0.1.0"
