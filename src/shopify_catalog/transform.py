from __future__ import annotations
from typing import List, Optional

from .errors import EmptyInput
from .normalize import slugify_for_handle


SHOPIFY_HEADERS = [
    "Handle",
    "Title",
    "Body (HTML)",
    "Vendor",
    "Product Category",
    "Type",
    "Tags",
    "Published",
    "Option1 Name",
    "Option1 Value",
    "Option2 Name",
    "Option2 Value",
    "Option3 Name",
    "Option3 Value",
    "Variant SKU",
    "Variant Grams",
    "Variant Inventory Tracker",
    "Variant Inventory Qty",
    "Variant Inventory Policy",
    "Variant Fulfillment Service",
    "Variant Price",
    "Variant Compare At Price",
    "Variant Requires Shipping",
    "Variant Taxable",
    "Variant Barcode",
    "Image Src",
    "Image Position",
    "Image Alt Text",
    "Gift Card",
    "SEO Title",
    "SEO Description",
    "Google Shopping / Google Product Category",
    "Google Shopping / Gender",
    "Google Shopping / Age Group",
    "Google Shopping / MPN",
    "Google Shopping / AdWords Grouping",
    "Google Shopping / Condition",
    "Google Shopping / Custom Product",
    "Variant Image",
    "Variant Weight Unit",
    "Variant Tax Code",
    "Cost per item",
    "Status",
]

# Columns only the first row of a product carries.
PRODUCT_LEVEL_HEADERS = [
    "Title",
    "Body (HTML)",
    "Vendor",
    "Product Category",
    "Type",
    "Tags",
    "Published",
    "Option1 Name",
    "Option2 Name",
    "Option3 Name",
    "Gift Card",
    "Status",
]

DEFAULT_INVENTORY_POLICY = "deny"
DEFAULT_FULFILLMENT_SERVICE = "manual"
DEFAULT_WEIGHT_UNIT = "kg"


def _text(v) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v).strip()


def _flag(v, default: bool = True) -> str:
    if v is None:
        return "true" if default else "false"
    return "true" if v else "false"


def _grams(v) -> str:
    if v is None or v == "":
        return "0"
    try:
        f = float(v)
    except (TypeError, ValueError):
        return "0"
    return str(int(f)) if f.is_integer() else str(f)


def product_handle(product: dict) -> str:
    handle = _text(product.get("handle"))
    if handle:
        return handle
    return slugify_for_handle(_text(product.get("title"))) or _text(product.get("id"))


def _tags(product: dict) -> str:
    tags = product.get("tags") or []
    if isinstance(tags, str):
        return tags.strip()
    return ", ".join(_text(t) for t in tags if _text(t))


def _image_src(image) -> str:
    if isinstance(image, dict):
        return _text(image.get("src"))
    return _text(image)


def _importable_images(product: dict) -> list:
    # An image row without a src cannot be imported; such entries are skipped
    # and take no position, so positions stay contiguous from 1.
    return [im for im in (product.get("images") or []) if _image_src(im)]


def _first_image(product: dict) -> Optional[dict]:
    images = _importable_images(product)
    return images[0] if images else None


def _blank_row(handle: str) -> dict:
    out = {h: "" for h in SHOPIFY_HEADERS}
    out["Handle"] = handle
    return out


def _fill_product_fields(out: dict, product: dict) -> None:
    published = bool(product.get("published_at"))
    out["Title"] = _text(product.get("title"))
    out["Body (HTML)"] = product.get("body_html") or ""
    out["Vendor"] = _text(product.get("vendor"))
    out["Type"] = _text(product.get("product_type"))
    out["Tags"] = _tags(product)
    out["Published"] = "true" if published else "false"
    out["Gift Card"] = "false"
    out["Status"] = _text(product.get("status")) or ("active" if published else "draft")
    options = product.get("options") or []
    for i, opt in enumerate(options[:3], start=1):
        name = opt.get("name") if isinstance(opt, dict) else opt
        out[f"Option{i} Name"] = _text(name)


def _fill_variant_defaults(out: dict) -> None:
    out["Variant Grams"] = "0"
    out["Variant Inventory Policy"] = DEFAULT_INVENTORY_POLICY
    out["Variant Fulfillment Service"] = DEFAULT_FULFILLMENT_SERVICE
    out["Variant Requires Shipping"] = "true"
    out["Variant Taxable"] = "true"
    out["Variant Weight Unit"] = DEFAULT_WEIGHT_UNIT


def _fill_variant_fields(out: dict, variant: dict, fallback_image: str) -> None:
    _fill_variant_defaults(out)
    for i in (1, 2, 3):
        out[f"Option{i} Value"] = _text(variant.get(f"option{i}"))
    out["Variant SKU"] = _text(variant.get("sku"))
    out["Variant Grams"] = _grams(variant.get("grams"))
    out["Variant Price"] = _text(variant.get("price"))
    out["Variant Compare At Price"] = _text(variant.get("compare_at_price"))
    out["Variant Requires Shipping"] = _flag(variant.get("requires_shipping"))
    out["Variant Taxable"] = _flag(variant.get("taxable"))
    out["Variant Barcode"] = _text(variant.get("barcode"))
    if variant.get("inventory_policy"):
        out["Variant Inventory Policy"] = _text(variant.get("inventory_policy"))
    if variant.get("fulfillment_service"):
        out["Variant Fulfillment Service"] = _text(variant.get("fulfillment_service"))
    out["Variant Image"] = _image_src(variant.get("featured_image")) or fallback_image


def product_to_shopify_rows(product: dict) -> List[dict]:
    """Expand one product into its bulk-import rows.

    One row per variant (or a single row for a product without variants),
    followed by one row per extra image. Product-level columns and the first
    image only appear on the first row.
    """
    handle = product_handle(product)
    first_image = _first_image(product)
    first_src = _image_src(first_image) if first_image else ""
    variants = [v for v in (product.get("variants") or []) if isinstance(v, dict)]

    rows: List[dict] = []
    if not variants:
        out = _blank_row(handle)
        _fill_product_fields(out, product)
        _fill_variant_defaults(out)
        rows.append(out)
    else:
        for idx, variant in enumerate(variants):
            out = _blank_row(handle)
            if idx == 0:
                _fill_product_fields(out, product)
            _fill_variant_fields(out, variant, first_src)
            rows.append(out)

    if first_image:
        rows[0]["Image Src"] = first_src
        rows[0]["Image Position"] = "1"
        rows[0]["Image Alt Text"] = _text(first_image.get("alt")) if isinstance(first_image, dict) else ""

    extra = _importable_images(product)[1:]
    for position, image in enumerate(extra, start=2):
        out = _blank_row(handle)
        out["Image Src"] = _image_src(image)
        out["Image Position"] = str(position)
        rows.append(out)
    return rows


def transform_rows(products: list) -> List[dict]:
    if not products:
        raise EmptyInput()
    out_rows: List[dict] = []
    for product in products:
        out_rows.extend(product_to_shopify_rows(product))
    return out_rows
