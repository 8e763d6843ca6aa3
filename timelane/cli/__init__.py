"""
CLI Package.

Command-line tools for inspecting lane assignment and viewport culling.
"""
