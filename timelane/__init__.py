"""
Timelane Package.

Timeline virtualization engine: lane packing, date/pixel mapping and
viewport culling for large sets of date-ranged items.
"""

__version__ = "0.1.0"
