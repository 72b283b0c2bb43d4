"""SDK resources for the IRIS API.

Each resource wraps one family of REST endpoints. Methods return plain
dicts/lists decoded from JSON; sub-resources are reached through accessor
methods (``leads.notes(lead_id)``) or properties (``leads.aggregation``).
"""

from iris_cli.resources._base import Resource
from iris_cli.resources.agents import AgentsResource
from iris_cli.resources.bloqs import BloqsResource
from iris_cli.resources.leads import (
    DeliverablesResource,
    LeadAggregationResource,
    LeadsResource,
    NotesResource,
    TasksResource,
)

__all__ = [
    "AgentsResource",
    "BloqsResource",
    "DeliverablesResource",
    "LeadAggregationResource",
    "LeadsResource",
    "NotesResource",
    "Resource",
    "TasksResource",
]
