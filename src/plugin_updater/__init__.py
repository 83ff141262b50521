"""
Plugin Updater - centralized GitHub release updater for WordPress plugins.

This package lets plugins register for update checks against GitHub
releases, compares versions, surfaces update and detail records to the
host, and relocates freshly installed packages. The updater keeps itself
current through the same mechanism.
"""

__version__ = "1.0.1"
