"""
App Package.

Stateful orchestration of the timeline engine and application defaults.
"""
