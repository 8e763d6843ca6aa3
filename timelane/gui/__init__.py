"""
GUI Package.

Qt glue between host widgets and the timeline controller.
"""
