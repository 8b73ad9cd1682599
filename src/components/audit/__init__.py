"""
Audit component - Audit logging and querying.
"""

from .component import AuditService, run_query
from .models import AuditAction, AuditListOutput, QueryAuditInput
from .ports import AuditRepoPort, TimePort

__all__ = [
    # Entry points
    "run_query",
    "AuditService",
    # Models
    "AuditAction",
    "QueryAuditInput",
    "AuditListOutput",
    # Ports
    "AuditRepoPort",
    "TimePort",
]
