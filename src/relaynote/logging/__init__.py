"""Logging subsystem for relaynote.

Public API::

    from relaynote.logging import configure_logging

    configure_logging(settings.logging)
"""

from relaynote.logging.setup import configure_logging

__all__ = ["configure_logging"]
