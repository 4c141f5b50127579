from .structure import *
from .errors import *
from .selection import Selection
from .graph import Graph

__all__ = ["structure", "errors", "Selection", "Graph"]
