from __future__ import annotations

import asyncio

import pytest

from scent_layering.core.models import SearchHit
from scent_layering.orchestrator import SearchSession


def hit(name: str) -> SearchHit:
    return SearchHit(id=name, name=name, brand="House", url=name)


async def test_newer_query_cancels_in_flight_search():
    gate = asyncio.Event()
    calls: list[str] = []

    async def search_fn(query):
        calls.append(query)
        if query == "bleu":
            await gate.wait()
        return [hit(query)]

    session = SearchSession(search_fn)
    slow = asyncio.create_task(session.search("bleu"))
    await asyncio.sleep(0)

    results = await session.search("sauvage")

    with pytest.raises(asyncio.CancelledError):
        await slow
    assert [item.id for item in results] == ["sauvage"]
    assert session.latest_query == "sauvage"
    assert session.latest == results


async def test_short_query_publishes_empty_results_without_searching():
    calls: list[str] = []

    async def search_fn(query):
        calls.append(query)
        return [hit(query)]

    session = SearchSession(search_fn)
    await session.search("bleu")

    assert await session.search("b") == []
    assert session.latest == []
    assert session.latest_query == "b"
    assert calls == ["bleu"]


async def test_errors_propagate_to_caller():
    async def search_fn(query):
        raise RuntimeError("boom")

    session = SearchSession(search_fn)
    with pytest.raises(RuntimeError):
        await session.search("bleu")
    assert session.latest == []
