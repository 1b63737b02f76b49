"""Routing — path patterns, per-method route tables and guards.

Routes are registered during setup and frozen into read-only tuples
when the app freezes.
"""

from crooner.routing.guards import evaluate_guards, host_name, user_agent
from crooner.routing.pattern import CompiledPattern, build_params, compile_path
from crooner.routing.route import Route
from crooner.routing.table import RouteTable

__all__ = [
    "CompiledPattern",
    "Route",
    "RouteTable",
    "build_params",
    "compile_path",
    "evaluate_guards",
    "host_name",
    "user_agent",
]
