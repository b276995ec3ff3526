"""
Order Flow Simulation Script

Fires a burst of concurrent orders at a running server, then walks each order
through a few statuses as the admin client would (status update followed by
a /notify-user call). Run from project root:

    python scripts/simulate.py --orders 50 --password <admin password>
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 50
STATUS_WALK = ["u pripremi", "poslato", "isporučeno"]
CUSTOMER_DEVICE = "ExponentPushToken[simulated-customer]"

MENU_ITEMS = [
    {"sku": "PIZZA-MARG", "name": "Pica Margarita", "price": 890},
    {"sku": "PLJESKAVICA", "name": "Pljeskavica", "price": 650},
    {"sku": "CEVAPI-10", "name": "Ćevapi (10 kom)", "price": 720},
    {"sku": "SOPSKA", "name": "Šopska salata", "price": 380},
    {"sku": "PALACINKE", "name": "Palačinke", "price": 340},
    {"sku": "KOKA-KOLA", "name": "Coca-Cola 0.5", "price": 180},
]


def generate_order() -> dict[str, Any]:
    """Random order payload for /create-order."""
    items = []
    for menu_item in random.sample(MENU_ITEMS, random.randint(1, 4)):
        items.append({**menu_item, "qty": random.randint(1, 3)})
    total = sum(item["price"] * item["qty"] for item in items)
    return {
        "items": items,
        "total": total,
        "customer": random.choice(["Marko", "Jelena", "Nikola", "Ana", "Stefan"]),
        "address": f"Bulevar oslobođenja {random.randint(1, 200)}",
        "pushToken": CUSTOMER_DEVICE,
    }


async def send_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    payload = generate_order()
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/create-order", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            return {
                "order_num": order_num,
                "success": True,
                "order_id": response.json().get("orderId"),
                "total": payload["total"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def admin_login(client: httpx.AsyncClient, password: str) -> Optional[str]:
    response = await client.post(f"{API_BASE_URL}/admin/login", json={"password": password})
    if response.status_code != 200:
        print(f"   ❌ Admin login failed ({response.status_code}): {response.text[:100]}")
        return None
    return response.json()["token"]


async def walk_statuses(client: httpx.AsyncClient, token: str, order_id: str) -> int:
    """Update + notify for each status; returns the number of failed steps."""
    headers = {"Authorization": f"Bearer {token}"}
    failures = 0

    for status in STATUS_WALK:
        response = await client.post(
            f"{API_BASE_URL}/admin/update-order-status",
            json={"orderId": order_id, "status": status},
            headers=headers,
        )
        if response.status_code != 200:
            failures += 1
            continue

        # Separate call, exactly like the admin app does it
        response = await client.post(
            f"{API_BASE_URL}/notify-user",
            json={"token": CUSTOMER_DEVICE, "orderId": order_id, "status": status},
        )
        if response.status_code != 200:
            failures += 1

    return failures


async def run_simulation(num_orders: int, password: Optional[str]) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 ORDER FLOW SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        response = await client.get(f"{API_BASE_URL}/health")
        print(f"\n🩺 Health: {response.json().get('status')}")

        print("\n🚀 Firing orders...\n")
        results = await asyncio.gather(*[send_order(client, i + 1) for i in range(num_orders)])

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        step_failures = 0
        if password and successful:
            token = await admin_login(client, password)
            if token:
                print("🔁 Walking statuses as admin...\n")
                counts = await asyncio.gather(*[
                    walk_statuses(client, token, r["order_id"]) for r in successful
                ])
                step_failures = sum(counts)

    total_time = round(time.time() - start_time, 2)

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Average create-order response: {avg_time}s")
        print(f"   💰 Total: {sum(r['total'] for r in successful)} RSD")

    if password:
        print(f"\n🔁 Failed status/notify steps: {step_failures}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "step_failures": step_failures,
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order Flow Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--password", help="Admin password; enables the status walk")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    summary = asyncio.run(run_simulation(args.orders, args.password))
    sys.exit(0 if summary["failed"] == 0 else 1)
