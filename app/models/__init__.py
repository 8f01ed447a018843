# Identity
from app.models.users.user_models import User

# Catalog
from app.models.masters.product_models import Product

# Inventory
from app.models.inventory.inventory_location_models import InventoryLocation
from app.models.inventory.stock_ledger_models import StockLedgerEntry
from app.models.inventory.inventory_movement_models import InventoryMovement
from app.models.inventory.transfer_manifest_models import TransferManifest, TransferManifestItem

# Quality
from app.models.quality.quality_check_models import QualityCheckRecord

# Billing
from app.models.billing.invoice_models import Invoice, InvoiceItem
