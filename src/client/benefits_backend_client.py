"""Shared backend client for the benefit rules API.

This module is intentionally dependency-light so it can be used by local
scripts/tests that want to call the read-only backend endpoints.
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import quote

import httpx


class BenefitsBackendClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (
            base_url
            or os.environ.get("BENEFITS_BACKEND_BASE_URL")
            or "http://127.0.0.1:8000/api/benefits"
        ).rstrip("/")
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else float(os.environ.get("BENEFITS_HTTP_TIMEOUT_SECONDS", "30"))
        )
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(url, params=params)

        request = {"url": url, "params": params or {}}
        if resp.status_code >= 400:
            return {
                "ok": False,
                "status_code": resp.status_code,
                "error": resp.text,
                "request": request,
            }

        return {
            "ok": True,
            "status_code": resp.status_code,
            "request": request,
            "response": resp.json(),
        }

    async def calculate_subsidy(self, *, income: int, household_size: int) -> dict[str, Any]:
        return await self._get(
            "/subsidy/calculate",
            params={"income": income, "household_size": household_size},
        )

    async def get_recipient_data(self, identity: str) -> dict[str, Any]:
        return await self._get(f"/recipients/{quote(identity, safe='')}")

    async def is_recipient_eligible(self, identity: str) -> dict[str, Any]:
        return await self._get(f"/recipients/{quote(identity, safe='')}/eligibility")

    async def check_excessive_usage(self, identity: str, period: int) -> dict[str, Any]:
        return await self._get(
            f"/usage/records/{quote(identity, safe='')}/{period}/excessive"
        )
