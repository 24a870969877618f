#!/usr/bin/env python3
import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from shopify_catalog import shopify_client as sc
from shopify_catalog.export import FORMATS, ExportOrchestrator, save_payload
from shopify_catalog.flatten import summary_fields_by_name
from shopify_catalog.io import read_mappings, read_products, write_bytes


logger = logging.getLogger("shopify_export")


def load_env(env_path: str) -> None:
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise FileNotFoundError(f"Env file not found: {p}")
        load_dotenv(p)
        return
    default_env = Path.cwd() / ".env"
    if default_env.exists():
        load_dotenv(default_env)


def parse_ids(raw: str) -> list:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export Shopify storefront products to CSV, Excel or Shopify bulk-import CSV.")
    parser.add_argument("--env-file", default="", help="Path to a .env file (defaults to ./.env when present)")
    parser.add_argument("--input", default="", help="Products JSON file ({\"products\": [...]} or a list)")
    parser.add_argument("--store-url", default=os.getenv("STORE_URL", ""), help="Storefront URL to fetch /products.json from")
    parser.add_argument("--fetch-limit", type=int, default=int(os.getenv("FETCH_LIMIT", "250")), help="Products per page when fetching (max 250)")
    parser.add_argument("--format", default=os.getenv("EXPORT_FORMAT", "csv"), choices=list(FORMATS), help="Export format")
    parser.add_argument("--mapping", default="", help="JSON file with [{\"field_name\": ..., \"product_key\": ...}] for custom exports")
    parser.add_argument("--fields", default="", help="Comma-separated summary fields for csv/xlsx exports")
    parser.add_argument("--ids", default="", help="Comma-separated product ids to export (default: all)")
    parser.add_argument("--output", default="", help="Output file path; defaults to a dated name in the current directory")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"), help="Logging level")
    return parser


def main(argv=None) -> int:
    env_only = argparse.ArgumentParser(add_help=False)
    env_only.add_argument("--env-file", default="")
    known, _ = env_only.parse_known_args(argv)
    load_env(known.env_file)

    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.input:
        products = read_products(Path(args.input))
    elif args.store_url:
        cfg = sc.StorefrontConfig(base_url=args.store_url, limit=args.fetch_limit)
        products = sc.fetch_all_products(
            cfg,
            on_progress=lambda page, count: logger.info(f"page {page}: {count} products"),
        )
    else:
        raise SystemExit("Either --input or --store-url is required")

    mappings = read_mappings(Path(args.mapping)) if args.mapping else None
    if args.format.startswith("custom") and not mappings:
        raise SystemExit("--mapping is required for custom exports")

    orchestrator = ExportOrchestrator(fields=summary_fields_by_name(parse_ids(args.fields)))
    payload = orchestrator.run(
        args.format,
        products,
        selection=parse_ids(args.ids) or None,
        mappings=mappings,
    )
    if args.output:
        out = write_bytes(Path(args.output), payload.content)
    else:
        out = save_payload(payload, Path.cwd())
    print(f"Wrote {payload.row_count} rows to {out}")
    return 0


def cli() -> None:
    try:
        sys.exit(main())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli()
