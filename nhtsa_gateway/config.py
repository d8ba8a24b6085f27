"""
Client configuration.

Defaults match the public NHTSA endpoints.  A JSON file can override any
field:

    {
        "timeout": 5.0,
        "recalls_url": "https://api.nhtsa.gov/recalls/recallsByVehicle"
    }
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DECODE_URL = "https://vpic.nhtsa.dot.gov/api/vehicles/decodevin/{vin}"
RECALLS_URL = "https://api.nhtsa.gov/recalls/recallsByVehicle"


@dataclass(frozen=True)
class ClientConfig:
    """NHTSA client configuration."""
    decode_url: str = DECODE_URL  # {vin} is substituted
    recalls_url: str = RECALLS_URL
    timeout: float = 10.0  # seconds, whole request
    max_redirects: int = 2
    user_agent: str = "NHTSAGateway/1.0"

    # Input bounds
    min_model_year: int = 1950
    max_year_ahead: int = 2  # model years run ahead of the calendar
    min_make_length: int = 3
    min_model_length: int = 3

    @property
    def max_model_year(self) -> int:
        return date.today().year + self.max_year_ahead

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientConfig':
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(path: Optional[Union[str, Path]] = None) -> ClientConfig:
    """Load config from disk, or return defaults."""
    if path is None:
        return ClientConfig()

    path = Path(path)
    if not path.exists():
        logger.warning(f"Config file {path} not found, using defaults")
        return ClientConfig()

    try:
        with open(path, encoding="utf-8") as f:
            saved = json.load(f)
        if not isinstance(saved, dict):
            raise ValueError("config root must be an object")
        return ClientConfig.from_dict(saved)
    except (OSError, ValueError, TypeError) as e:
        logger.warning(f"Error loading config {path}: {e}")
        return ClientConfig()
