# lokalaku/services/vendor_store.py
# Read-only access to the vendor records owned by the CRUD side of the marketplace.

import json
import logging
import os
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel

from lokalaku.models.domain import VendorRecord

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = os.path.join(
    os.path.dirname(__file__), "..", "..", "data", "vendors.json"
)

class VendorStore(Protocol):
    """What the discovery core needs from the vendor store: two simple reads."""
    def list_live_vendors(self) -> List[VendorRecord]: ...
    def get_vendor(self, vendor_id: int) -> Optional[VendorRecord]: ...

class VendorSnapshot(BaseModel):
    """Root model for vendors.json."""
    vendors: List[VendorRecord]

class InMemoryVendorStore:
    """Vendor store backed by a list held in memory.

    Used directly by tests and as the base for the JSON snapshot store.
    """

    def __init__(self, vendors: Optional[List[VendorRecord]] = None):
        self._by_id: Dict[int, VendorRecord] = {}
        for vendor in vendors or []:
            self._by_id[vendor.id] = vendor

    def __len__(self) -> int:
        return len(self._by_id)

    def list_live_vendors(self) -> List[VendorRecord]:
        # Store-level predicate: is_live == true
        return [v for v in self._by_id.values() if v.is_live]

    def get_vendor(self, vendor_id: int) -> Optional[VendorRecord]:
        return self._by_id.get(vendor_id)

class JsonVendorStore(InMemoryVendorStore):
    """Loads a vendor snapshot JSON file into memory on startup."""

    def __init__(self, file_path: Optional[str] = None):
        super().__init__()
        self.file_path = file_path or DEFAULT_STORE_PATH
        self._load()

    def _load(self):
        """Load the snapshot file and validate it with the Pydantic model."""
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            snapshot = VendorSnapshot.model_validate(data)
            self._by_id = {v.id: v for v in snapshot.vendors}
            logger.info(
                f"Successfully loaded {len(self._by_id)} vendors from snapshot."
            )
        except FileNotFoundError:
            logger.error(f"Vendor snapshot not found at: {self.file_path}")
            self._by_id = {}
        except Exception as e:
            logger.error(f"Error loading or validating vendor snapshot: {e}")
            self._by_id = {}
