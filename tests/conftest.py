"""Shared pytest fixtures: vendors placed at known distances and a scripted generation client."""

import asyncio
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

import pytest

from lokalaku.core.exceptions import UpstreamDegraded
from lokalaku.models.domain import Coordinate, VendorRecord
from lokalaku.utils.haversine import R

CENTER = Coordinate(latitude=-6.200000, longitude=106.816666)

# 2025-12-03 12:30 in Asia/Jakarta (UTC+7), a Wednesday noon
FIXED_NOW = datetime(2025, 12, 3, 5, 30, tzinfo=timezone.utc)


def north_of(center: Coordinate, meters: float) -> Coordinate:
    """Point due north of ``center``; its great-circle distance is exactly ``meters``."""
    dlat = math.degrees(meters / 1000.0 / R)
    return Coordinate(latitude=center.latitude + dlat, longitude=center.longitude)


class ScriptedGenerationClient:
    """Generation client double: replays a canned reply (or raises) and records prompts."""

    def __init__(self, reply: Union[str, Exception, None] = None, delay: float = 0.0):
        self.reply = reply
        self.delay = delay
        self.prompts: List[str] = []
        self.calls: List[dict] = []

    async def complete(self, prompt: str, *, timeout: float, max_tokens: int) -> str:
        self.prompts.append(prompt)
        self.calls.append({"timeout": timeout, "max_tokens": max_tokens})
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.reply, Exception):
            raise self.reply
        if self.reply is None:
            raise UpstreamDegraded("generation", "no scripted reply")
        return self.reply


@pytest.fixture
def center() -> Coordinate:
    return CENTER


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def make_vendor() -> Callable[..., VendorRecord]:
    def _make(
        vendor_id: int,
        meters: Optional[float] = None,
        *,
        name: Optional[str] = None,
        category: str = "Bakso",
        is_live: bool = True,
        origin: Coordinate = CENTER,
    ) -> VendorRecord:
        location = north_of(origin, meters) if meters is not None else None
        return VendorRecord(
            id=vendor_id,
            name=name or f"Warung {vendor_id}",
            category=category,
            contact_handle=f"62812000{vendor_id:04d}",
            is_live=is_live,
            location=location,
        )

    return _make


@pytest.fixture
def scripted_client() -> Callable[..., ScriptedGenerationClient]:
    return ScriptedGenerationClient
