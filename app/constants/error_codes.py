# app/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # Generic
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Catalog / locations
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"

    # Valuation
    INVALID_PRICING = "INVALID_PRICING"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    EXCHANGE_RATE_REQUIRED = "EXCHANGE_RATE_REQUIRED"

    # Line items
    EMPTY_LINE_ITEMS = "EMPTY_LINE_ITEMS"
    DUPLICATE_LINE_ITEM = "DUPLICATE_LINE_ITEM"

    # Stock ledger
    STOCK_ENTRY_NOT_FOUND = "STOCK_ENTRY_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    CONCURRENT_STOCK_UPDATE = "CONCURRENT_STOCK_UPDATE"

    # Quality check
    QUALITY_CHECK_NOT_FOUND = "QUALITY_CHECK_NOT_FOUND"
    QUALITY_CHECK_INVALID_STATUS = "QUALITY_CHECK_INVALID_STATUS"
    INTAKE_LOCATIONS_NOT_CONFIGURED = "INTAKE_LOCATIONS_NOT_CONFIGURED"

    # Transfer manifests
    MANIFEST_NOT_FOUND = "MANIFEST_NOT_FOUND"
    MANIFEST_BOX_EXISTS = "MANIFEST_BOX_EXISTS"
    MANIFEST_ALREADY_APPROVED = "MANIFEST_ALREADY_APPROVED"
    MANIFEST_INVALID_DESTINATION = "MANIFEST_INVALID_DESTINATION"
    MANIFEST_VERSION_CONFLICT = "MANIFEST_VERSION_CONFLICT"

    # Sales invoices
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
    INVOICE_NUMBER_EXISTS = "INVOICE_NUMBER_EXISTS"
    INVOICE_VERSION_CONFLICT = "INVOICE_VERSION_CONFLICT"
