"""Tests for PLUTO fetching and record parsing (mocked HTTP)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from feasibility.services.pluto import _parse_pluto_record, fetch_pluto_data

PLUTO_RECORD = {
    "bbl": "3002380001.00000000",
    "address": "100 MONTAGUE STREET",
    "borocode": "3",
    "block": "238",
    "lot": "1",
    "zonedist1": "R7-1",
    "zonedist2": "R6",
    "overlay1": "C1-3",
    "spdist1": None,
    "bldgclass": "D4",
    "landuse": "03",
    "lotarea": "5000",
    "lotfront": "50.0",
    "lotdepth": "100",
    "bldgarea": "18500",
    "unitsres": "24",
    "unitstotal": "26",
    "numfloors": "6",
    "yearbuilt": "1927",
    "cd": "302",
    "zipcode": "11201",
}


def _mock_client(mock_client_class, resp):
    mock_client = AsyncMock()
    mock_client.get.return_value = resp
    mock_client_class.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client_class.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestParsePlutoRecord:
    """Raw Socrata record → PlutoData."""

    def test_fields(self):
        pluto = _parse_pluto_record(PLUTO_RECORD)
        assert pluto.bbl == "3002380001"
        assert pluto.zoning_districts == ["R7-1", "R6"]
        assert pluto.overlays == ["C1-3"]
        assert pluto.special_districts == []
        assert pluto.bldgclass == "D4"
        assert pluto.lotarea == pytest.approx(5000)
        assert pluto.unitsres == 24
        assert pluto.yearbuilt == 1927
        assert pluto.cd == 302

    def test_malformed_numbers_become_none(self):
        pluto = _parse_pluto_record({"bbl": "3002380001", "lotarea": "n/a", "unitsres": ""})
        assert pluto.lotarea is None
        assert pluto.unitsres is None

    def test_blank_strings_become_none(self):
        pluto = _parse_pluto_record({"bbl": "3002380001", "zonedist1": "  "})
        assert pluto.zonedist1 is None


class TestFetchPlutoData:
    """Socrata fetch."""

    @pytest.mark.asyncio
    async def test_returns_record(self):
        resp = MagicMock()
        resp.json.return_value = [PLUTO_RECORD]
        with patch("feasibility.services.pluto.httpx.AsyncClient") as mock_client_class:
            mock_client = _mock_client(mock_client_class, resp)
            pluto = await fetch_pluto_data("3002380001", app_token="token")
        assert pluto.bbl == "3002380001"
        _, kwargs = mock_client.get.call_args
        assert kwargs["params"]["bbl"] == "3002380001"
        assert kwargs["headers"] == {"X-App-Token": "token"}

    @pytest.mark.asyncio
    async def test_no_record(self):
        resp = MagicMock()
        resp.json.return_value = []
        with patch("feasibility.services.pluto.httpx.AsyncClient") as mock_client_class:
            _mock_client(mock_client_class, resp)
            assert await fetch_pluto_data("3999990001", app_token="") is None

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        request = httpx.Request("GET", "https://data.cityofnewyork.us/resource/64uk-42ks.json")
        resp = MagicMock()
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "server error", request=request, response=httpx.Response(500, request=request),
        )
        with patch("feasibility.services.pluto.httpx.AsyncClient") as mock_client_class:
            _mock_client(mock_client_class, resp)
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_pluto_data("3002380001", app_token="")
