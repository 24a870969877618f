"""Shared product fixtures shaped like a storefront /products.json payload."""
import pytest


def make_variant(idx: int = 1, **overrides) -> dict:
    variant = {
        "id": 1000 + idx,
        "title": f"Size {idx}",
        "option1": f"S{idx}",
        "option2": None,
        "option3": None,
        "sku": f"SKU-{idx}",
        "requires_shipping": True,
        "taxable": True,
        "featured_image": None,
        "available": True,
        "price": "19.99",
        "grams": 250,
        "compare_at_price": None,
        "position": idx,
        "product_id": 1,
        "created_at": "2024-01-15T10:30:00-05:00",
        "updated_at": "2024-01-16T08:00:00-05:00",
    }
    variant.update(overrides)
    return variant


def make_image(idx: int = 1, **overrides) -> dict:
    image = {
        "id": 5000 + idx,
        "position": idx,
        "product_id": 1,
        "variant_ids": [],
        "src": f"https://cdn.example.com/img-{idx}.jpg",
        "width": 800,
        "height": 600,
        "created_at": "2024-01-15T10:30:00-05:00",
        "updated_at": "2024-01-15T10:30:00-05:00",
    }
    image.update(overrides)
    return image


def make_product(pid: int = 1, variants: int = 1, images: int = 1, **overrides) -> dict:
    product = {
        "id": pid,
        "title": f"Product {pid}",
        "handle": f"product-{pid}",
        "body_html": "<p>Soft <strong>cotton</strong> tee</p>",
        "published_at": "2024-01-15T10:30:00-05:00",
        "created_at": "2024-01-10T09:00:00-05:00",
        "updated_at": "2024-01-20T12:00:00-05:00",
        "vendor": "Acme",
        "product_type": "Shirt",
        "tags": ["summer", "cotton"],
        "variants": [make_variant(i + 1, product_id=pid) for i in range(variants)],
        "images": [make_image(i + 1, product_id=pid) for i in range(images)],
        "options": [{"name": "Size", "position": 1, "values": [f"S{i + 1}" for i in range(variants)]}] if variants else [],
    }
    product.update(overrides)
    return product


@pytest.fixture
def product():
    return make_product()


@pytest.fixture
def products():
    return [make_product(i, variants=(i % 3) + 1, images=i % 4) for i in range(1, 6)]
