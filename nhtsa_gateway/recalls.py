"""
Recall normalization.

Reshapes the "results" list of the NHTSA recallsByVehicle API into
RecallRecord objects.  Entries missing any required field are skipped;
one bad entry never spoils the rest of the batch.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from .models import RecallRecord
from .timestamp import parse_timestamp

logger = logging.getLogger(__name__)

# Raw recall keys
K_CAMPAIGN = "NHTSACampaignNumber"
K_RECEIVED = "ReportReceivedDate"
K_COMPONENT = "Component"
K_SUMMARY = "Summary"
K_REMEDY = "Remedy"

COMPONENT_SEPARATOR = ":"


def parse_components(component: str) -> List[str]:
    """Split "ENGINE:FUEL SYSTEM" into ["ENGINE", "FUEL SYSTEM"]."""
    if not component:
        return []
    return component.split(COMPONENT_SEPARATOR)


def parse_recall(entry: Any) -> Optional[RecallRecord]:
    """
    Validate and convert a single raw recall.

    Returns:
        RecallRecord, or None if a required field is missing.
    """
    if not isinstance(entry, Mapping):
        return None

    campaign = entry.get(K_CAMPAIGN)
    received = entry.get(K_RECEIVED)
    component = entry.get(K_COMPONENT)
    summary = entry.get(K_SUMMARY)
    remedy = entry.get(K_REMEDY)

    if not campaign or not received:
        return None
    if not isinstance(component, str):
        return None
    if not summary or not remedy:
        return None

    return RecallRecord(
        campaign_number=str(campaign),
        components=tuple(parse_components(component)),
        date=parse_timestamp(str(received)).date(),
        description=str(summary),
        remedy=str(remedy),
    )


def parse_recalls(entries: Optional[Iterable[Any]]) -> List[RecallRecord]:
    """
    Convert raw recall results into RecallRecords, preserving order.

    Args:
        entries: The response "results" list

    Returns:
        List of valid records (possibly empty)
    """
    records: List[RecallRecord] = []
    for entry in entries or []:
        record = parse_recall(entry)
        if record is None:
            campaign = entry.get(K_CAMPAIGN) if isinstance(entry, Mapping) else None
            logger.debug(f"Skipping incomplete recall entry {campaign or '<unknown>'}")
            continue
        records.append(record)
    return records
