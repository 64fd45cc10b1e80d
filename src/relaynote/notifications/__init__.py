"""Aggregate notification copy.

Public API::

    from relaynote.notifications import BatchRenderer
"""

from relaynote.notifications.renderer import BatchRenderer

__all__ = ["BatchRenderer"]
