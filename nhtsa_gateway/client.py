"""
NHTSA API Client

Async client for the free NHTSA vehicle APIs (no key needed):

    vPIC DecodeVin    https://vpic.nhtsa.dot.gov/api/
    Recalls           https://api.nhtsa.gov/recalls/

Usage:
    async with NHTSAClient() as nhtsa:
        profile = await nhtsa.decode("2B3KA43R86H389824")
        # -> VehicleProfile(model_year=2006, make='DODGE', model='CHARGER', ...)

        recalls = await nhtsa.recalls(2015, "Ford", "Mustang")
        # -> [RecallRecord(campaign_number='15V310000', ...), ...]

Every lookup returns None on failure, whatever the cause (bad input,
network trouble, an error reply from NHTSA).  Requests are single-shot:
no retries, no caching.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from .config import ClientConfig
from .decode import filter_results, parse_decode
from .errors import (
    InvalidInputError,
    NHTSAError,
    UpstreamSemanticError,
    UpstreamUnavailableError,
)
from .models import DecodeTable, RecallRecord, VehicleProfile
from .recalls import parse_recalls

logger = logging.getLogger(__name__)

VIN_LENGTH = 17


class NHTSAClient:
    """
    NHTSA decode and recall lookups.

    Provides:
    - Input validation (no request is made for an invalid VIN/year/make/model)
    - Raw lookups: decode_vin(), get_recalls()
    - Normalized lookups: decode(), recalls()
    """

    def __init__(self, config: Optional[ClientConfig] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Args:
            config: Client configuration (defaults to public endpoints)
            session: Existing aiohttp session to use.  The caller keeps
                ownership of it; close() leaves it open.
        """
        self.config = config or ClientConfig()
        self._session = session
        self._owns_session = session is None

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> 'NHTSAClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if we created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def is_valid_vin(vin: Any) -> bool:
        """Check VIN length (17 characters)."""
        return isinstance(vin, str) and len(vin) == VIN_LENGTH

    def is_valid_model_year(self, model_year: Any) -> bool:
        """Check model year lies within [min_model_year, this year + max_year_ahead]."""
        if isinstance(model_year, bool) or not isinstance(model_year, int):
            return False
        return self.config.min_model_year <= model_year <= self.config.max_model_year

    def _check_decode_args(self, vin: Any, model_year: Optional[int]) -> None:
        if not self.is_valid_vin(vin):
            raise InvalidInputError(f"VIN must be {VIN_LENGTH} characters")
        if model_year is not None and not self.is_valid_model_year(model_year):
            raise InvalidInputError(f"Model year {model_year} out of range")

    def _check_recall_args(self, model_year: Any, make: Any, model: Any) -> None:
        if not self.is_valid_model_year(model_year):
            raise InvalidInputError(f"Model year {model_year} out of range")
        if not isinstance(make, str) or len(make) < self.config.min_make_length:
            raise InvalidInputError(f"Make {make!r} too short")
        if not isinstance(model, str) or len(model) < self.config.min_model_length:
            raise InvalidInputError(f"Model {model!r} too short")

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.config.user_agent},
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            )
            self._owns_session = True
        return self._session

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a URL and decode the JSON body.

        Raises:
            UpstreamUnavailableError: on timeout, connection error, HTTP
                error status, too many redirects or an unparseable body.
        """
        session = self._get_session()
        try:
            async with session.get(
                url,
                params=params,
                allow_redirects=True,
                max_redirects=self.config.max_redirects,
                raise_for_status=True,
            ) as resp:
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailableError(f"Timed out after {self.config.timeout}s") from e
        except aiohttp.ClientError as e:
            raise UpstreamUnavailableError(f"HTTP request failed: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailableError(f"Invalid JSON response: {e}") from e

    @staticmethod
    def _log_failure(action: str, e: NHTSAError) -> None:
        if isinstance(e, UpstreamUnavailableError):
            logger.warning(f"{action}: NHTSA API unavailable: {e}")
        else:
            logger.debug(f"{action}: {e}")

    # -------------------------------------------------------------------------
    # VIN Decode
    # -------------------------------------------------------------------------

    async def _fetch_decode(self, vin: str, model_year: Optional[int]) -> DecodeTable:
        self._check_decode_args(vin, model_year)

        vin = vin.upper()
        params: Dict[str, Any] = {"format": "json"}
        if model_year is not None:
            params["modelyear"] = model_year

        url = self.config.decode_url.format(vin=quote(vin, safe=""))
        data = await self._get_json(url, params)
        if not isinstance(data, dict):
            raise UpstreamSemanticError("Decode response is not an object")

        table = filter_results(data.get("Results"), data.get("Count"))
        if table is None:
            raise UpstreamSemanticError(f"VIN {vin[:6]}... could not be decoded")

        logger.debug(f"Decoded {len(table)} fields for VIN {vin[:6]}...")
        return table

    async def decode_vin(self, vin: str, model_year: Optional[int] = None) -> Optional[DecodeTable]:
        """
        Decode a 17-character VIN.

        Args:
            vin: Vehicle Identification Number
            model_year: Optional model year hint

        Returns:
            Filtered variable-id -> VariableRow table, or None
        """
        try:
            return await self._fetch_decode(vin, model_year)
        except NHTSAError as e:
            self._log_failure("VIN decode", e)
            return None

    async def decode(self, vin: str, model_year: Optional[int] = None) -> Optional[VehicleProfile]:
        """Decode a VIN into a Year/Make/Model/Trim/Engine profile."""
        table = await self.decode_vin(vin, model_year)
        return parse_decode(table) if table else None

    # -------------------------------------------------------------------------
    # Recalls
    # -------------------------------------------------------------------------

    async def _fetch_recalls(self, model_year: int, make: str, model: str) -> List[Dict[str, Any]]:
        self._check_recall_args(model_year, make, model)

        params = {
            "modelYear": model_year,
            "make": make.upper(),
            "model": model.upper(),
        }
        data = await self._get_json(self.config.recalls_url, params)
        if not isinstance(data, dict):
            raise UpstreamSemanticError("Recall response is not an object")

        count = data.get("Count")
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise UpstreamSemanticError(f"No recalls for {model_year} {make} {model}")

        results = data.get("results")
        if not isinstance(results, list):
            raise UpstreamSemanticError("Recall response has no results list")

        logger.debug(f"Fetched {len(results)} recalls for {model_year} {make} {model}")
        return results

    async def get_recalls(self, model_year: int, make: str, model: str) -> Optional[List[Dict[str, Any]]]:
        """
        Fetch raw recalls for a vehicle.

        Args:
            model_year: Model year (1950 to this year + 2)
            make: Manufacturer, at least 3 characters
            model: Model name, at least 3 characters

        Returns:
            Raw "results" list, or None
        """
        try:
            return await self._fetch_recalls(model_year, make, model)
        except NHTSAError as e:
            self._log_failure("Recall lookup", e)
            return None

    async def recalls(self, model_year: int, make: str, model: str) -> Optional[List[RecallRecord]]:
        """Fetch recalls for a vehicle as validated RecallRecords."""
        results = await self.get_recalls(model_year, make, model)
        if results is None:
            return None
        return parse_recalls(results)
