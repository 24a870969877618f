"""
Shopify catalog browsing and export library.

This package provides modular building blocks for:
- Resolving path expressions against nested product records
- Browsing products with filters, sorting, pagination and pinned columns
- Emitting summary CSV/Excel, Shopify bulk-import CSV and custom-mapped exports

Public API:
- paths.parse_path, paths.resolve, paths.resolve_raw
- table.TableEngine, table.ColumnDescriptor, table.PRODUCT_COLUMNS
- pagination.build_page_items
- io.escape_field, io.build_csv, io.workbook_bytes, io.read_products
- flatten.flatten_records, flatten.DEFAULT_SUMMARY_FIELDS
- mapping.FieldMapping, mapping.build_custom_rows
- transform.SHOPIFY_HEADERS, transform.transform_rows
- export.ExportOrchestrator, export.select_records
- shopify_client.fetch_all_products
"""

from . import errors, normalize, paths, pagination, table, io, flatten, mapping, transform, export, shopify_client  # re-export modules

__all__ = [
    "errors",
    "normalize",
    "paths",
    "pagination",
    "table",
    "io",
    "flatten",
    "mapping",
    "transform",
    "export",
    "shopify_client",
]
