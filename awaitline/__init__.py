# Timer-backed deferred values for asyncio
from .context import SequenceContextManager
from .decorator import procedure
from .deferred import Deferred
from .demo import run
from .errors import AwaitlineError, DeferredPendingError
from .helpers import defer, emit, sum
from .result import SequenceResult

# The main context manager factory
sequence = SequenceContextManager

__all__ = [
    'sequence',
    'procedure',
    'defer',
    'emit',
    'run',
    'Deferred',
    'SequenceContextManager',
    'SequenceResult',
    'AwaitlineError',
    'DeferredPendingError',
]
