"""Script to import products from a JSON file into the catalog."""
import json
import argparse
import httpx
from typing import List, Dict, Any


def load_products(file_path: str) -> List[Dict[str, Any]]:
    """Load products from JSON file."""
    with open(file_path, 'r') as f:
        return json.load(f)


def create_product(client: httpx.Client, api_url: str, product: Dict[str, Any]) -> bool:
    """Create a single product via API."""
    try:
        response = client.post(
            f"{api_url}/admin/products/",
            json=product,
            timeout=30.0
        )
    except httpx.HTTPError as e:
        print(f"✗ Error creating {product['name']}: {str(e)}")
        return False
    
    if response.status_code == 201:
        print(f"✓ Created: {product['name']} ({product['slug']})")
        return True
    
    print(f"✗ Failed: {product['name']} ({product['slug']}) - {response.status_code}")
    try:
        print(f"  Error: {response.json()}")
    except ValueError:
        print(f"  Error: {response.text}")
    return False


def main():
    """Import every product in the file."""
    parser = argparse.ArgumentParser(description="Import catalog products")
    parser.add_argument("file", nargs="?", default="data/products.json", help="Products JSON file")
    parser.add_argument("--url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    
    products = load_products(args.file)
    
    print(f"Found {len(products)} products in {args.file}, importing...")
    print("-" * 60)
    
    success_count = 0
    failed_count = 0
    
    with httpx.Client() as client:
        for product in products:
            if create_product(client, args.url, product):
                success_count += 1
            else:
                failed_count += 1
    
    print("-" * 60)
    print(f"Import complete: {success_count} succeeded, {failed_count} failed")


if __name__ == "__main__":
    main()
