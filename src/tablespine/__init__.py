"""
tablespine - map dataclass entities onto relational tables.

Re-exports the public API of :mod:`tablespine.core`.
"""

__version__ = "0.1.0"

from tablespine.core import *  # noqa
from tablespine.core import __all__ as _core_all

__all__ = list(_core_all)
