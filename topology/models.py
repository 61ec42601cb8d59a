from pydantic import BaseModel, ConfigDict
from typing import List, Optional
import enum

# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class DriverFamily(str, enum.Enum):
    """Storage backend family, matched by substring of the CSI driver name"""
    ISILON = "isilon"
    POWERMAX = "powermax"
    GENERIC = "generic"


class DisplayField(str, enum.Enum):
    """Dashboard-facing field names accepted by filters and distinct-value search"""
    NAMESPACE = "Namespace"
    PROTOCOL = "Protocol"
    STATUS = "Status"
    CSI_DRIVER = "CSI Driver"
    STORAGE_POOL = "Storage Pool"
    STORAGE_SYSTEM = "Storage System"
    STORAGE_CLASS = "Storage Class"


NOT_AVAILABLE = "N/A"
PROTOCOL_NFS = "nfs"

# ============================================================================
# RECORD MODELS
# ============================================================================

class VolumeInfo(BaseModel):
    """Uniform record describing a persistent volume and its storage-side volume"""
    model_config = ConfigDict(frozen=True)

    namespace: str
    persistent_volume_claim: str  # claim UID
    volume_status: str
    volume_claim_name: str
    persistent_volume: str
    storage_class: str
    driver: str
    provisioned_size: str
    storage_system_volume_name: str
    storage_pool_name: str
    storage_system: str
    protocol: str
    created_time: str


# ============================================================================
# DASHBOARD PROTOCOL MODELS
# ============================================================================

class QueryTarget(BaseModel):
    """One dashboard target; `target` is a JSON-encoded {field: substring} map"""
    target: str


class QueryRequest(BaseModel):
    """Table query request body"""
    targets: Optional[List[QueryTarget]] = None


class SearchRequest(BaseModel):
    """Distinct-values query request body"""
    target: Optional[str] = None


class TableColumn(BaseModel):
    text: str
    type: str = "string"


class TableResponse(BaseModel):
    """Table-shaped response consumed by the dashboard"""
    type: str = "table"
    columns: List[TableColumn]
    rows: List[List[str]]
