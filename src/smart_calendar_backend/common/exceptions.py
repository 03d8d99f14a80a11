"""
This file contains custom, application-specific exceptions.
"""

class PersistenceError(Exception):
    """Raised when flushing pending changes to the database fails."""
    pass

class LabelNotFoundError(Exception):
    """Raised when a label ID is not known to the schedule."""
    pass
