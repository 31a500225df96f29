"""Sign a JSON event with a webhook secret and POST it to a running gateway.

Useful for exercising `/webhooks` locally without the Stripe CLI.
"""

import argparse
import asyncio
import json
from pathlib import Path

import httpx

from paygate.services.gateway.webhooks import SIGNATURE_HEADER, sign_payload


async def send(base_url: str, secret: str, payload: bytes) -> httpx.Response:
    """Post one signed payload and return the gateway response."""

    headers = {SIGNATURE_HEADER: sign_payload(payload, secret), "content-type": "application/json"}
    async with httpx.AsyncClient(timeout=5.0) as client:
        return await client.post(f"{base_url}/webhooks", content=payload, headers=headers)


def main() -> None:
    """Parse CLI args and send one signed event."""

    parser = argparse.ArgumentParser(description="Send a signed Stripe-style webhook event.")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--secret", required=True, help="Webhook signing secret (whsec_...)")
    parser.add_argument("--type", dest="event_type", default="charge.succeeded")
    parser.add_argument("--file", dest="json_file", default=None, help="Path to a full event JSON file")
    args = parser.parse_args()

    if args.json_file:
        payload = Path(args.json_file).read_bytes()
    else:
        event = {"id": "evt_local_test", "object": "event", "type": args.event_type, "data": {"object": {}}}
        payload = json.dumps(event).encode("utf-8")

    resp = asyncio.run(send(args.base_url, args.secret, payload))
    print(f"status={resp.status_code} body={resp.text}")


if __name__ == "__main__":
    main()
