#!/usr/bin/env python3
"""Export a stored record collection to PDF (or CSV) from the command line."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finassist.config import DOWNLOAD_DIR, STORE_PATH, configure_logging
from finassist.downloads import DirectoryDownloader
from finassist.pdf_table import PdfCapability
from finassist.runtime import PageRuntime
from finassist.storage import KeyValueStore, read_collection


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export a stored collection.")
    parser.add_argument("--store", type=Path, default=STORE_PATH, help="JSON store file")
    parser.add_argument("--key", required=True, help="Storage key of the collection, e.g. tfm_expenses")
    parser.add_argument("--output", required=True, help="Output file name, e.g. expenses.pdf")
    parser.add_argument("--format", choices=["pdf", "csv"], default="pdf")
    parser.add_argument("--out-dir", type=Path, default=DOWNLOAD_DIR, help="Directory to write into")
    args = parser.parse_args(argv)

    configure_logging()
    capability = PdfCapability()
    if args.format == "pdf":
        capability.load()
    downloader = DirectoryDownloader(args.out_dir)
    runtime = PageRuntime(
        store=KeyValueStore(path=args.store),
        downloader=downloader,
        capability=capability,
    )

    if args.format == "pdf":
        asyncio.run(runtime.export_list_as_pdf(args.key, args.output))
    else:
        records = read_collection(runtime.store, args.key)
        header = list(records[0].keys()) if records and isinstance(records[0], dict) else []
        runtime.download_array_as_csv(records, args.output, header)

    for level, message in runtime.notifier.notices:
        print(f"[{level}] {message}")
    if not downloader.written:
        return 1
    for path in downloader.written:
        print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
