"""
vPIC decode normalization.

Turns the ~140 coded rows of a DecodeVin response into a short profile:

    filter_results()  raw "Results" rows -> id-keyed DecodeTable (or None)
    parse_decode()    DecodeTable -> VehicleProfile

Trim and Engine are synthesized from several fields.  The manufacturer's
free-text engine model often already names the valve train, fuel or turbo,
so each coded suffix is only added when the string built so far doesn't
already contain an equivalent word.

Example:
    table = filter_results(data["Results"], data["Count"])
    profile = parse_decode(table)
    # VehicleProfile(model_year=2006, make='DODGE', model='CHARGER',
    #                trim='SXT RWD', engine='3.5L 6-CYL SOHC MPFI 250BHP')
"""

import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import DecodeTable, VariableRow, VehicleProfile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# vPIC variable IDs
# ---------------------------------------------------------------------------

V_BODY_CLASS = 5
V_ENG_NUM_CYLINDERS = 9
V_ENG_DISPLACEMENT_CC = 11
V_ENG_DISPLACEMENT_L = 13
V_DRIVE_TYPE = 15
V_ENG_MODEL = 18
V_ENG_FUEL_PRIMARY = 24
V_MAKE = 26
V_MODEL = 28
V_MODEL_YEAR = 29
V_TRIM = 38
V_ENG_VALVE_DESIGN = 62
V_ENG_FUEL_INJECTION = 67
V_ENG_BHP = 71
V_ENG_TURBO = 135
V_ERROR_CODE = 143  # present only when vPIC could not decode the VIN

# Raw response keys
K_NAME = "Variable"
K_ID = "VariableId"
K_VALUE = "Value"
K_VALUE_ID = "ValueId"

_ERROR_TEXT = "Error Text"
_NOT_APPLICABLE = "Not Applicable"

# Engine model strings longer than this are marketing copy, not a model code
MAX_ENGINE_MODEL_LENGTH = 30

# ---------------------------------------------------------------------------
# ValueId -> label tables
# ---------------------------------------------------------------------------

DRIVE_TYPES = MappingProxyType({
    1: "FWD",
    2: "4WD",
    3: "AWD",
    4: "RWD",
})

BODY_CLASSES = MappingProxyType({
    1: "CONVERTIBLE",
    3: "COUPE",
    8: "CUV",
    15: "WAGON",
})

VALVE_DESIGNS = MappingProxyType({
    1: "CVA",
    2: "DOHC",
    3: "OHV",
    4: "SOHC",
})

FUEL_TYPES = MappingProxyType({
    1: "DIESEL",
    6: "CNG",
    7: "LNG",
    8: "H2",
    9: "LPG",
    10: "(E85)",
    15: "(FLEX)",
})

FUEL_INJECTION_TYPES = MappingProxyType({
    1: "SGDI",
    2: "LBGDI",
    3: "MPFI",
    4: "SFI",
    6: "CRDI",
    7: "UDI",
})

TURBO_YES = 1

# Words that mean a step's information is already in the engine string
_VALVE_WORDS = re.compile(r"\b(DOHC|SOHC|CVA|OHV)\b", re.IGNORECASE)
_FUEL_WORDS = re.compile(r"\b(DIESEL|CNG|E85|FLEX)\b", re.IGNORECASE)
_INJECTION_WORDS = re.compile(r"\b(SGDI|MPFI|SFI)\b", re.IGNORECASE)
_TURBO_WORDS = re.compile(r"\b(TURBO|TDI)\b", re.IGNORECASE)

_MULTI_SPACE = re.compile(r"\s\s+")


# ---------------------------------------------------------------------------
# Raw result filtering
# ---------------------------------------------------------------------------

def _is_blank(value: Any) -> bool:
    """vPIC uses null, "" and "0" for "nothing here"."""
    return value is None or value == "" or value == "0"


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _row_from_result(item: Any) -> Optional[VariableRow]:
    """Build a VariableRow from one raw result, or None if it should be dropped."""
    if not isinstance(item, Mapping):
        return None

    var_id = _to_int(item.get(K_ID))
    name = item.get(K_NAME)
    value = item.get(K_VALUE)

    if not var_id or _is_blank(name):
        return None
    if _is_blank(value):
        return None
    if name == _ERROR_TEXT or value == _NOT_APPLICABLE:
        return None

    return VariableRow(
        id=var_id,
        name=str(name),
        value=str(value),
        value_id=_to_int(item.get(K_VALUE_ID)),
    )


def filter_results(results: Iterable[Any], count: Any,
                   sentinel_id: int = V_ERROR_CODE) -> Optional[DecodeTable]:
    """
    Clean raw DecodeVin rows into an id-keyed lookup table.

    Args:
        results: The response "Results" list
        count: The response "Count" value
        sentinel_id: Variable id whose presence marks the response as an error report

    Returns:
        Read-only mapping of variable id -> VariableRow, or None if the
        response is empty or describes an undecodable VIN.
    """
    table: Dict[int, VariableRow] = {}
    for item in results or []:
        row = _row_from_result(item)
        if row is not None:
            table[row.id] = row

    count = _to_int(count)
    if count is None or count <= 0:
        logger.debug("Decode response has no results")
        return None

    if sentinel_id in table:
        logger.debug(f"Decode response is an error report: {table[sentinel_id].value}")
        return None

    return MappingProxyType(table)


# ---------------------------------------------------------------------------
# Profile synthesis
# ---------------------------------------------------------------------------

def _clean(text: str) -> str:
    return _MULTI_SPACE.sub(" ", text).strip().upper()


def _value(table: DecodeTable, var_id: int) -> Optional[str]:
    row = table.get(var_id)
    return row.value if row else None


def _value_id(table: DecodeTable, var_id: int) -> Optional[int]:
    row = table.get(var_id)
    return row.value_id if row else None


def _decimal(value: Optional[str]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _is_numeric(value: Optional[str]) -> bool:
    return _decimal(value) is not None


def _format_displacement(table: DecodeTable) -> Optional[str]:
    """5.967 -> "6.0L", 1998 -> "1,998CC".  Liters win whenever present."""
    try:
        if V_ENG_DISPLACEMENT_L in table:
            liters = _decimal(_value(table, V_ENG_DISPLACEMENT_L))
            if liters is None:
                return None
            return f"{liters.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}L"

        cc = _decimal(_value(table, V_ENG_DISPLACEMENT_CC))
        if cc is not None:
            return f"{int(cc.quantize(Decimal('1'), rounding=ROUND_HALF_UP)):,}CC"
    except InvalidOperation:
        # too many digits to round, e.g. "1E+30"
        logger.debug("Ignoring out-of-range engine displacement")

    return None


def parse_trim(table: DecodeTable) -> str:
    """Trim + drive type + body class, e.g. "LIMITED AWD WAGON"."""
    trim = _value(table, V_TRIM) or ""

    drive = DRIVE_TYPES.get(_value_id(table, V_DRIVE_TYPE))
    if drive:
        trim += " " + drive

    body = BODY_CLASSES.get(_value_id(table, V_BODY_CLASS))
    if body:
        trim += " " + body

    return _clean(trim)


def parse_engine(table: DecodeTable) -> str:
    """Build an engine description, e.g. "6.2L 8-CYL OHV SFI 420BHP"."""
    parts: List[str] = []

    def built() -> str:
        return " ".join(parts)

    displacement = _format_displacement(table)
    if displacement:
        parts.append(displacement)

    cylinders = _value(table, V_ENG_NUM_CYLINDERS)
    if cylinders is not None:
        parts.append(f"{cylinders}-CYL")

    engine_model = _value(table, V_ENG_MODEL)
    if engine_model is not None and len(engine_model) <= MAX_ENGINE_MODEL_LENGTH:
        parts.append(engine_model)

    if not _VALVE_WORDS.search(built()):
        valve = VALVE_DESIGNS.get(_value_id(table, V_ENG_VALVE_DESIGN))
        if valve:
            parts.append(valve)

    if not _FUEL_WORDS.search(built()):
        fuel = FUEL_TYPES.get(_value_id(table, V_ENG_FUEL_PRIMARY))
        if fuel:
            parts.append(fuel)

    if not _INJECTION_WORDS.search(built()):
        injection = FUEL_INJECTION_TYPES.get(_value_id(table, V_ENG_FUEL_INJECTION))
        if injection:
            parts.append(injection)

    if not _TURBO_WORDS.search(built()):
        if _value_id(table, V_ENG_TURBO) == TURBO_YES:
            parts.append("TURBO")

    bhp = _value(table, V_ENG_BHP)
    if _is_numeric(bhp):
        parts.append(f"{bhp}BHP")

    return _clean(built())


def parse_decode(table: Optional[DecodeTable]) -> Optional[VehicleProfile]:
    """
    Convert a filtered decode table into a VehicleProfile.

    Returns:
        VehicleProfile, or None if the table is empty.  Individual fields
        may be None (year/make/model) or "" (trim/engine).
    """
    if not table:
        return None

    year = _decimal(_value(table, V_MODEL_YEAR))
    make = _value(table, V_MAKE)
    model = _value(table, V_MODEL)

    return VehicleProfile(
        model_year=int(year) if year is not None else None,
        make=make.upper() if make is not None else None,
        model=model.upper() if model is not None else None,
        trim=parse_trim(table),
        engine=parse_engine(table),
    )
