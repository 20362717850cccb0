"""shadowvault - directory-scoped backup lifecycle engine.

Every managed file keeps its retired versions in a hidden sibling
directory; deletes, updates and renames preserve them and crush destroys
them beyond recovery.
"""

__version__ = "0.1.0"
