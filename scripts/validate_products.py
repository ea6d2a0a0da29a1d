#!/usr/bin/env python3
"""
Validate a products JSON dump against the catalog product schema.

Checks that every product parses, prices resolve, and reports products
that could never be added to a cart (unpublished or out of stock).

Usage:
    python scripts/validate_products.py data/products.json
    python scripts/validate_products.py data/products.json --strict  # warnings fail too
"""

import sys
import json
from pathlib import Path
from typing import Any, Dict, List
import argparse

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import TypeAdapter, ValidationError
from storefront.schemas.product import Product
from storefront.services.product_service import (
    format_price,
    get_product_price,
    is_product_available,
)

products_adapter = TypeAdapter(List[Product])


def load_products(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    # Accept raw lists as well as {"success": true, "data": [...]} API dumps
    if isinstance(data, dict) and "data" in data:
        return data["data"]
    return data


def validate(data: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {"valid": True, "count": 0, "errors": [], "warnings": []}
    try:
        products = products_adapter.validate_python(data)
    except ValidationError as e:
        result["valid"] = False
        result["errors"] = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        return result

    result["count"] = len(products)
    seen = set()
    for product in products:
        if product.id in seen:
            result["errors"].append(f"{product.id}: duplicate product id")
            result["valid"] = False
        seen.add(product.id)

        price = get_product_price(product)
        if price <= 0:
            result["warnings"].append(f"{product.id} ({product.name}): no active variant price")
        if not is_product_available(product):
            result["warnings"].append(f"{product.id} ({product.name}): not purchasable")
        else:
            print(f"   {product.name}: {format_price(price)}")
    return result


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a products JSON file")
    parser.add_argument("path", type=Path, help="Path to products JSON")
    parser.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    args = parser.parse_args()

    print(f"🔍 Validating {args.path}...")
    result = validate(load_products(args.path))

    print("\n" + "=" * 60)
    print("📊 VALIDATION RESULTS")
    print("=" * 60 + "\n")

    if result["valid"]:
        print(f"✅ PASS - {args.path.name}")
        print(f"   └─ {result['count']} products validated successfully")
    else:
        print(f"❌ FAIL - {args.path.name}")
        for error in result["errors"]:
            print(f"   └─ {error}")

    for warning in result["warnings"]:
        print(f"   ⚠️  {warning}")

    failed = not result["valid"] or (args.strict and result["warnings"])
    print("=" * 60)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
