# docs_mirror/__init__.py
"""
docs-mirror package initializer.
Defines package version.
"""
__version__ = "0.1.0"
