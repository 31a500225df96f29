"""Mixed read/write load against the gateway's customer routes.

Each virtual user creates a customer, then fetches it back `--reads` times.
Results are grouped per route template so write and read latency can be told
apart. Point it at a gateway backed by a Stripe test-mode key.
"""

import argparse
import asyncio
import statistics
import time
from collections import Counter, defaultdict
from uuid import uuid4

import httpx


async def timed(client: httpx.AsyncClient, method: str, url: str, **kwargs):
    """Return (status_code, latency_ms, response or None); 599 on transport errors."""

    started = time.perf_counter()
    try:
        resp = await client.request(method, url, headers={"x-correlation-id": str(uuid4())}, **kwargs)
    except httpx.HTTPError:
        return 599, (time.perf_counter() - started) * 1000, None
    return resp.status_code, (time.perf_counter() - started) * 1000, resp


async def session(client: httpx.AsyncClient, base_url: str, reads: int, samples: dict[str, list]):
    payload = {"email": f"load-{uuid4().hex[:12]}@example.com", "metadata": {"source": "load_test", "batch": 1}}
    status, latency, resp = await timed(client, "POST", f"{base_url}/customers", json=payload)
    samples["POST /customers"].append((status, latency))
    if resp is None or status != 201:
        return

    customer_id = resp.json().get("id")
    for _ in range(reads):
        status, latency, _ = await timed(client, "GET", f"{base_url}/customers/{customer_id}")
        samples["GET /customers/:id"].append((status, latency))


def percentile(values: list[float], p: float) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    return ordered[min(len(ordered) - 1, max(0, int(p / 100.0 * len(ordered)) - 1))]


def report(samples: dict[str, list]) -> None:
    for route, results in samples.items():
        latencies = [latency for _, latency in results]
        statuses = Counter(status for status, _ in results)
        failed = sum(count for status, count in statuses.items() if not 200 <= status < 300)
        print(f"[{route}] requests={len(results)} failed={failed} by_status={dict(sorted(statuses.items()))}")
        print(
            f"[{route}] p50_ms={percentile(latencies, 50):.2f} p95_ms={percentile(latencies, 95):.2f} "
            f"p99_ms={percentile(latencies, 99):.2f} avg_ms={statistics.mean(latencies):.2f}"
        )


async def run(users: int, concurrency: int, reads: int, base_url: str):
    sem = asyncio.Semaphore(concurrency)
    samples: dict[str, list] = defaultdict(list)

    async with httpx.AsyncClient(timeout=10.0) as client:

        async def user():
            async with sem:
                await session(client, base_url, reads, samples)

        await asyncio.gather(*(user() for _ in range(users)))

    report(samples)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--users", type=int, default=100)
    parser.add_argument("--concurrency", type=int, default=20)
    parser.add_argument("--reads", type=int, default=3, help="GETs per created customer")
    parser.add_argument("--base-url", default="http://localhost:8000")
    args = parser.parse_args()
    asyncio.run(run(args.users, args.concurrency, args.reads, args.base_url))
