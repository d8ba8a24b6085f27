"""
NHTSA Data Models

Value objects produced by the decode and recall normalizers.

    VariableRow    - one coded field from a vPIC DecodeVin response
    VehicleProfile - canonical Year/Make/Model/Trim/Engine summary
    RecallRecord   - a validated recall campaign
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class VariableRow:
    """A single decoded vPIC variable."""
    id: int
    name: str
    value: str
    value_id: Optional[int] = None  # secondary code, e.g. drive type 3 = AWD

    def to_dict(self) -> Dict[str, Any]:
        return {
            'Variable': self.name,
            'VariableId': self.id,
            'Value': self.value,
            'ValueId': self.value_id,
        }


# Filtered decode result, keyed by variable id
DecodeTable = Mapping[int, VariableRow]


@dataclass(frozen=True)
class VehicleProfile:
    """Compact, human-readable vehicle description."""
    model_year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: str = ""
    engine: str = ""

    def __str__(self) -> str:
        parts = [str(self.model_year) if self.model_year else "", self.make or "", self.model or "",
                 self.trim, self.engine]
        return " ".join(p for p in parts if p)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'model_year': self.model_year,
            'make': self.make,
            'model': self.model,
            'trim': self.trim,
            'engine': self.engine,
        }


@dataclass(frozen=True)
class RecallRecord:
    """A safety recall campaign."""
    campaign_number: str
    date: date
    description: str
    remedy: str
    components: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'campaign_number': self.campaign_number,
            'components': list(self.components),
            'date': self.date.isoformat(),
            'description': self.description,
            'remedy': self.remedy,
        }
