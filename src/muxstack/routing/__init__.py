"""Routing — pattern parsing and the shared multiplexer.

Patterns are registered during setup; matching walks a trie whose depth is
the number of path segments.
"""

from muxstack.routing.mux import RouteMatch, ServeMux
from muxstack.routing.pattern import PathSegment, Pattern, parse_pattern

__all__ = ["PathSegment", "Pattern", "RouteMatch", "ServeMux", "parse_pattern"]
