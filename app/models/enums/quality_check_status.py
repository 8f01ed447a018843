from enum import Enum


class QualityCheckStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
