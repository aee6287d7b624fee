"""
darkpool_intake -- submission validation and queueing.

Architecture: imports from darkpool_kernel and darkpool_config only.
"""

from darkpool_intake.service import IntakeService
from darkpool_intake.validators import validate_submission

__all__ = ["IntakeService", "validate_submission"]
