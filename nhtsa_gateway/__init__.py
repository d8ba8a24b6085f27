"""
NHTSA Gateway - VIN decode and safety recall lookups

Queries the NHTSA vPIC and recall APIs and boils the answers down to a
clean Year/Make/Model/Trim/Engine profile and a list of recall records.
"""

__version__ = "1.0.0"

from .client import NHTSAClient
from .config import ClientConfig, load_config
from .decode import filter_results, parse_decode
from .models import RecallRecord, VariableRow, VehicleProfile
from .recalls import parse_recalls
from .timestamp import parse_timestamp

__all__ = [
    "NHTSAClient",
    "ClientConfig",
    "load_config",
    "filter_results",
    "parse_decode",
    "parse_recalls",
    "parse_timestamp",
    "RecallRecord",
    "VariableRow",
    "VehicleProfile",
]
