from enum import Enum


class ProductStatus(str, Enum):
    pending_qc = "pending_qc"
    qc_failed = "qc_failed"
    store_pending = "store_pending"
    store_approved = "store_approved"
