"""
This module contains context variables used by awaitline.
Context variables let `defer`, `emit` and `@procedure` find the active
`sequence` block without it being passed around explicitly.
"""
from contextvars import ContextVar

# Holds the currently active SequenceContextManager instance.
current_sequence = ContextVar('current_sequence', default=None)
