"""Tests for NHTSAClient.

Covers: input preconditions (no request made), request construction,
semantic failures, transport failure mapping, and the normalized
decode()/recalls() helpers.  The upstream fetch is replaced with an
AsyncMock; no network access is needed.
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from conftest import make_row
from nhtsa_gateway.client import NHTSAClient
from nhtsa_gateway.config import ClientConfig
from nhtsa_gateway.errors import UpstreamUnavailableError
from nhtsa_gateway.models import VehicleProfile

VIN = "2B3KA43R86H389824"
THIS_YEAR = date.today().year


@pytest.fixture
def client():
    return NHTSAClient()


def _mock_fetch(client, payload=None, side_effect=None):
    client._get_json = AsyncMock(return_value=payload, side_effect=side_effect)
    return client._get_json


class _FakeResponse:
    """Minimal async context manager standing in for aiohttp's response."""

    def __init__(self, payload=None, error=None):
        self._payload = payload
        self._error = error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type=None):
        if self._error:
            raise self._error
        return self._payload


def _fake_session(get_side_effect=None, response=None):
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if get_side_effect is not None:
        session.get.side_effect = get_side_effect
    else:
        session.get.return_value = response
    return session


# ===================================================================
# Validation
# ===================================================================


class TestValidation:

    @pytest.mark.parametrize("vin", ["", "SHORT", VIN[:-1], VIN + "X", None, 12345678901234567])
    async def test_bad_vin_makes_no_request(self, client, vin) -> None:
        fetch = _mock_fetch(client, {})
        assert await client.decode_vin(vin) is None
        fetch.assert_not_awaited()

    @pytest.mark.parametrize("year", [1949, THIS_YEAR + 3, 0, -2015])
    async def test_decode_year_out_of_range(self, client, year) -> None:
        fetch = _mock_fetch(client, {})
        assert await client.decode_vin(VIN, year) is None
        fetch.assert_not_awaited()

    @pytest.mark.parametrize("year", [1949, THIS_YEAR + 3, 0, None])
    async def test_recall_year_out_of_range(self, client, year) -> None:
        fetch = _mock_fetch(client, {})
        assert await client.get_recalls(year, "FORD", "MUSTANG") is None
        fetch.assert_not_awaited()

    @pytest.mark.parametrize("make,model", [("VW", "GOLF"), ("FORD", "GT"), ("", "MUSTANG"), (None, "MUSTANG")])
    async def test_recall_short_make_or_model(self, client, make, model) -> None:
        fetch = _mock_fetch(client, {})
        assert await client.get_recalls(2015, make, model) is None
        fetch.assert_not_awaited()

    def test_year_bounds_inclusive(self, client) -> None:
        assert client.is_valid_model_year(1950)
        assert client.is_valid_model_year(THIS_YEAR + 2)
        assert not client.is_valid_model_year(True)
        assert not client.is_valid_model_year("2015")

    def test_bounds_follow_config(self) -> None:
        client = NHTSAClient(ClientConfig(min_model_year=1981, max_year_ahead=0))
        assert not client.is_valid_model_year(1980)
        assert not client.is_valid_model_year(THIS_YEAR + 1)
        assert client.is_valid_model_year(THIS_YEAR)


# ===================================================================
# Decode
# ===================================================================


class TestDecode:

    async def test_request_without_year(self, client, decode_response) -> None:
        fetch = _mock_fetch(client, decode_response)
        table = await client.decode_vin(VIN.lower())
        assert table is not None
        fetch.assert_awaited_once_with(
            f"https://vpic.nhtsa.dot.gov/api/vehicles/decodevin/{VIN}",
            {"format": "json"},
        )

    async def test_request_with_year(self, client, decode_response) -> None:
        fetch = _mock_fetch(client, decode_response)
        await client.decode_vin(VIN, 2006)
        _, params = fetch.await_args.args
        assert params == {"format": "json", "modelyear": 2006}

    async def test_decode_profile(self, client, decode_response) -> None:
        _mock_fetch(client, decode_response)
        profile = await client.decode(VIN)
        assert profile == VehicleProfile(
            model_year=2006,
            make="DODGE",
            model="CHARGER",
            trim="SXT RWD",
            engine="3.5L 6-CYL EGG SOHC MPFI 250BHP",
        )

    async def test_invalid_vin_sentinel(self, client) -> None:
        _mock_fetch(client, {
            "Count": 3,
            "Results": [
                make_row(143, "Error Code", "1", "1"),
                make_row(191, "Error Text", "1 - Check Digit (9th position) does not calculate properly", ""),
                make_row(26, "Make", "DODGE", "476"),
            ],
        })
        assert await client.decode_vin(VIN) is None
        assert await client.decode(VIN) is None

    async def test_zero_count(self, client) -> None:
        _mock_fetch(client, {"Count": 0, "Results": []})
        assert await client.decode_vin(VIN) is None

    @pytest.mark.parametrize("payload", [None, [], "oops", {"Message": "Error"}])
    async def test_malformed_payload(self, client, payload) -> None:
        _mock_fetch(client, payload)
        assert await client.decode_vin(VIN) is None

    async def test_upstream_unavailable(self, client) -> None:
        _mock_fetch(client, side_effect=UpstreamUnavailableError("HTTP 503"))
        assert await client.decode(VIN) is None


# ===================================================================
# Recalls
# ===================================================================


class TestRecalls:

    async def test_request_params_upper_cased(self, client, recall_response) -> None:
        fetch = _mock_fetch(client, recall_response)
        results = await client.get_recalls(2015, "Ford", "Mustang")
        assert results == recall_response["results"]
        fetch.assert_awaited_once_with(
            "https://api.nhtsa.gov/recalls/recallsByVehicle",
            {"modelYear": 2015, "make": "FORD", "model": "MUSTANG"},
        )

    async def test_records(self, client, recall_response) -> None:
        _mock_fetch(client, recall_response)
        records = await client.recalls(2015, "Ford", "Mustang")
        assert [r.campaign_number for r in records] == ["15V340000", "16V005000"]
        assert records[0].components == ("ENGINE", "FUEL SYSTEM")

    async def test_all_entries_invalid_gives_empty_list(self, client) -> None:
        _mock_fetch(client, {"Count": 1, "results": [{"NHTSACampaignNumber": "15V340000"}]})
        assert await client.recalls(2015, "Ford", "Mustang") == []

    async def test_zero_count(self, client) -> None:
        _mock_fetch(client, {"Count": 0, "results": []})
        assert await client.get_recalls(2015, "Ford", "Mustang") is None
        assert await client.recalls(2015, "Ford", "Mustang") is None

    async def test_upper_case_results_key_not_accepted(self, client, recall_entries) -> None:
        _mock_fetch(client, {"Count": 2, "Results": recall_entries})
        assert await client.get_recalls(2015, "Ford", "Mustang") is None

    async def test_upstream_unavailable(self, client) -> None:
        _mock_fetch(client, side_effect=UpstreamUnavailableError("timeout"))
        assert await client.recalls(2015, "Ford", "Mustang") is None


# ===================================================================
# Transport
# ===================================================================


class TestTransport:

    async def test_get_options(self, decode_response) -> None:
        session = _fake_session(response=_FakeResponse(decode_response))
        client = NHTSAClient(ClientConfig(max_redirects=2), session=session)
        assert await client.decode_vin(VIN) is not None

        kwargs = session.get.call_args.kwargs
        assert kwargs["allow_redirects"] is True
        assert kwargs["max_redirects"] == 2
        assert kwargs["raise_for_status"] is True

    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("refused"),
        aiohttp.TooManyRedirects(MagicMock(), ()),
        asyncio.TimeoutError(),
    ])
    async def test_transport_errors_give_none(self, error) -> None:
        session = _fake_session(get_side_effect=error)
        client = NHTSAClient(session=session)
        assert await client.decode_vin(VIN) is None
        assert await client.get_recalls(2015, "FORD", "MUSTANG") is None

    async def test_bad_json_gives_none(self) -> None:
        session = _fake_session(response=_FakeResponse(error=ValueError("Expecting value")))
        client = NHTSAClient(session=session)
        assert await client.decode_vin(VIN) is None

    async def test_bad_json_raises_unavailable_internally(self) -> None:
        session = _fake_session(response=_FakeResponse(error=ValueError("Expecting value")))
        client = NHTSAClient(session=session)
        with pytest.raises(UpstreamUnavailableError):
            await client._get_json("https://example.invalid")

    async def test_injected_session_left_open(self) -> None:
        session = _fake_session()
        async with NHTSAClient(session=session):
            pass
        session.close.assert_not_awaited()

    async def test_owned_session_closed(self) -> None:
        client = NHTSAClient()
        session = client._get_session()
        assert not session.closed
        await client.close()
        assert session.closed
