"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on the orchestrator (business logic), not directly on
repositories.

Architecture:
    Handler -> Orchestrator -> Repository
    (HTTP)  -> (Business)   -> (Data Access)
"""

from .scenario_handler import ScenarioHandler, to_http_exception, to_scenario_response

__all__ = [
    "ScenarioHandler",
    "to_http_exception",
    "to_scenario_response",
]
