from collections import defaultdict

import httpx
import pytest

from scripts.load_test import percentile, session


def gateway_stub(request: httpx.Request) -> httpx.Response:
    if request.method == "POST" and request.url.path == "/customers":
        return httpx.Response(201, json={"id": "cus_load"})
    if request.method == "GET" and request.url.path == "/customers/cus_load":
        return httpx.Response(200, json={"id": "cus_load"})
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_session_creates_then_reads_back():
    samples = defaultdict(list)
    async with httpx.AsyncClient(transport=httpx.MockTransport(gateway_stub)) as client:
        await session(client, "http://gateway", 3, samples)

    assert [status for status, _ in samples["POST /customers"]] == [201]
    assert [status for status, _ in samples["GET /customers/:id"]] == [200, 200, 200]


@pytest.mark.asyncio
async def test_session_skips_reads_when_create_fails():
    samples = defaultdict(list)
    transport = httpx.MockTransport(lambda request: httpx.Response(503, json={"error": "unconfigured"}))
    async with httpx.AsyncClient(transport=transport) as client:
        await session(client, "http://gateway", 3, samples)

    assert [status for status, _ in samples["POST /customers"]] == [503]
    assert "GET /customers/:id" not in samples


def test_percentile():
    assert percentile([], 50) == 0.0
    assert percentile([5.0, 1.0, 3.0, 2.0], 50) == 2.0
    assert percentile([5.0, 1.0, 3.0, 2.0], 99) == 3.0
