"""
Play date scheduler - shared availability grid for children.
"""

__version__ = "0.1.0"
