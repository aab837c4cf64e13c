import os
import sys

import requests

base_url = os.getenv("WAREHOUSE_BASE_URL", "http://localhost:8000").rstrip("/")


def main() -> int:
    ready_response = requests.get(f"{base_url}/ready", timeout=15)
    ready_response.raise_for_status()
    if not ready_response.json().get("ok"):
        print("Warehouse API is up but its database is not reachable", file=sys.stderr)
        return 1

    low_stock_response = requests.get(
        f"{base_url}/variants/low-stock",
        params={"limit": 20, "offset": 0},
        timeout=15,
    )
    low_stock_response.raise_for_status()

    out_of_stock_response = requests.get(
        f"{base_url}/variants/out-of-stock",
        params={"limit": 1, "offset": 0},
        timeout=15,
    )
    out_of_stock_response.raise_for_status()

    low_stock = low_stock_response.json()
    print(f"Low-stock variants: {low_stock['pagination']['total']}")
    for variant in low_stock["items"]:
        print(f"  {variant['sku']}: {variant['stock_quantity']} (min {variant['min_stock_level']})")
    print(f"Out-of-stock variants: {out_of_stock_response.json()['pagination']['total']}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except requests.RequestException as exc:
        print(f"Warehouse API probe failed: {exc}", file=sys.stderr)
        raise SystemExit(1)
