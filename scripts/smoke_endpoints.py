# scripts/smoke_endpoints.py
"""
Manual smoke run against a live backend:

    BACKEND_URL=http://127.0.0.1:8000 SMOKE_USER=... SMOKE_PASSWORD=... python scripts/smoke_endpoints.py
"""
import io
import os
import sys
import time

from PIL import Image, ImageDraw

from storefront.api import ApiClient
from storefront.config import BACKEND_URL, configure_logging
from storefront.errors import StorefrontError
from storefront.session import MemorySessionStore, SessionRepository


def create_sample_image_bytes(text="sample"):
    img = Image.new("RGB", (800, 600), color=(240, 240, 240))
    d = ImageDraw.Draw(img)
    d.text((20, 20), text, fill=(10, 10, 10))
    b = io.BytesIO()
    img.save(b, format="JPEG")
    return b.getvalue()


def main():
    configure_logging()
    api = ApiClient(SessionRepository(MemorySessionStore()), base_url=BACKEND_URL)

    print("Listing products...")
    products = api.list_products()
    print(f"{len(products)} products")

    print("Logging in...")
    artisan_id = api.login(os.environ["SMOKE_USER"], os.environ["SMOKE_PASSWORD"])
    print("Artisan id:", artisan_id)

    categories, regions = api.list_categories(), api.list_regions()
    if not categories or not regions:
        print("Backend has no categories/regions; skipping product round trip.")
        return

    print("Creating product...")
    created = api.create_product(
        {
            "name": "Smoke Test Pot",
            "description": "Automated smoke upload",
            "price": "250.00",
            "category_id": categories[0].id,
            "region_id": regions[0].id,
            "artisan_id": artisan_id,
        },
        image=("sample.jpg", create_sample_image_bytes("Smoke Test Pot"), "image/jpeg"),
    )
    print("Created:", created)
    time.sleep(1)

    mine = api.list_artisan_products(artisan_id, auth=True)
    print(f"Artisan now has {len(mine)} products")

    print("Deleting product...")
    api.delete_product(created.id)
    print("Smoke run completed successfully.")


if __name__ == "__main__":
    try:
        main()
    except (StorefrontError, KeyError) as e:
        print("Error during smoke run:", e)
        sys.exit(1)
