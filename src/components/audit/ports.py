"""
Audit component - Port interfaces.
"""

from src.ports.clock import ClockPort as TimePort
from src.ports.repo import AuditRepoPort

__all__ = ["AuditRepoPort", "TimePort"]
