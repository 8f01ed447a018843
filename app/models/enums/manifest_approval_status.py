from enum import Enum


class ManifestApprovalStatus(str, Enum):
    draft = "draft"
    approved = "approved"
