# app/routers/__init__.py

from .quality.quality_check_router import router as quality_check_router

from .inventory.stock_ledger_router import router as stock_ledger_router
from .inventory.transfer_manifest_router import router as transfer_manifest_router

from .billing.invoice_router import router as invoice_router


__all__ = [
"quality_check_router",

"stock_ledger_router",
"transfer_manifest_router",

"invoice_router",
]
