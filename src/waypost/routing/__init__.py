"""Routing — ordered route table with groups, resources, and named routes.

Routes are registered during setup and matched first-match-wins, in
registration order. The route table is read-only once serving starts.
"""

from waypost.routing.handlers import CallableRef, InstanceMethodRef, TypeMethodRef
from waypost.routing.pattern import CompiledPath, compile_path
from waypost.routing.route import MatchResult, Route
from waypost.routing.router import Router

__all__ = [
    "CallableRef",
    "CompiledPath",
    "InstanceMethodRef",
    "MatchResult",
    "Route",
    "Router",
    "TypeMethodRef",
    "compile_path",
]
