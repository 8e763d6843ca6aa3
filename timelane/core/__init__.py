"""
Core Package.

Pure data model and algorithms of the timeline engine. Nothing in this
package imports Qt.
"""
