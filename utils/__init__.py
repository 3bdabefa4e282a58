"""
Shared helpers: configuration loading, numeric guards, logging setup.
"""
