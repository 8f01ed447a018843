# app/constants/user_roles.py
from enum import Enum


class UserRole(str, Enum):
    admin = "admin"
    # ledger pricing, adjustments and transfer manifests
    inventory = "inventory"
    qc = "qc"
    # sales invoices
    cashier = "cashier"
