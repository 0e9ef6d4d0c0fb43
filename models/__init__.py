from models.student import StudentRecord
from models.pairing_rule import PairingRule
from models.class_roster import AllocationResult, ClassRoster, RuleResolutionWarning
from models.session import AllocationSession

__all__ = [
    "StudentRecord",
    "PairingRule",
    "ClassRoster",
    "AllocationResult",
    "RuleResolutionWarning",
    "AllocationSession",
]
