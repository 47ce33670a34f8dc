#!/usr/bin/env python3
"""Command-line access to the prediction accountability platform.

Usage:
    python -m scripts.pap_cli status                  # sync state of both collections
    python -m scripts.pap_cli export -o claims.json   # dump every claim as a JSON array
    python -m scripts.pap_cli import claims.json      # replace all claims from an export
    python -m scripts.pap_cli analyze "Nepal's GDP will grow by 5.2% in 2025."
    python -m scripts.pap_cli manifesto manifesto.txt --language ne

Commands that touch claim data run the same startup protocol as the API:
the local cache is read first, the remote store is consulted when
configured, and pending remote writes are flushed before exit.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure the project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pap.container import AppContainer
from pap.domain import statistics
from pap.services.sync_coordinator import ImportValidationError

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("pap_cli")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Prediction accountability platform CLI.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show where each collection was loaded from")

    export = sub.add_parser("export", help="Export all claims as JSON")
    export.add_argument("-o", "--output", type=Path, default=None, help="File to write (default: stdout)")

    imp = sub.add_parser("import", help="Replace all claims from an exported JSON file")
    imp.add_argument("path", type=Path)

    analyze = sub.add_parser("analyze", help="Score a claim's vagueness")
    analyze.add_argument("text")
    analyze.add_argument("--language", choices=("en", "ne"), default=None)

    manifesto = sub.add_parser("manifesto", help="Extract commitments from a manifesto text file")
    manifesto.add_argument("path", type=Path)
    manifesto.add_argument("--language", choices=("en", "ne"), default=None)

    return parser.parse_args(argv)


async def _with_coordinator(container: AppContainer, action):
    container.init_resources()
    coordinator = container.sync_coordinator()
    await coordinator.start()
    try:
        return action(coordinator)
    finally:
        await coordinator.dispose()
        container.shutdown_resources()


async def run(args: argparse.Namespace, container: AppContainer) -> int:
    if args.command == "status":
        status = await _with_coordinator(container, lambda c: c.status())
        print(json.dumps(status, indent=2))
        return 0

    if args.command == "export":
        payload = await _with_coordinator(container, lambda c: c.export_claims())
        if args.output:
            args.output.write_text(payload, encoding="utf-8")
            print(f"Exported to {args.output}")
        else:
            print(payload)
        return 0

    if args.command == "import":
        try:
            text = args.path.read_text(encoding="utf-8")
            count = await _with_coordinator(container, lambda c: c.import_claims(text))
        except (OSError, ImportValidationError) as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return 1
        print(f"Imported {count} claims")
        return 0

    analysis = container.analysis_service()
    await analysis.init()
    try:
        if args.command == "analyze":
            result = await analysis.analyze_claim(args.text, args.language)
            print(result.model_dump_json(by_alias=True, indent=2))
            return 0

        if args.command == "manifesto":
            try:
                text = args.path.read_text(encoding="utf-8")
            except OSError as exc:
                print(f"Cannot read manifesto: {exc}", file=sys.stderr)
                return 1
            items, source = await analysis.extract_manifesto(text, args.language)
            for item in items:
                print(f"[{item.priority.value:>6}] {item.text}")
            print(f"\n{len(items)} commitments ({source.value}), "
                  f"{statistics.manifesto_completion(items)}% complete")
            return 0
    finally:
        await analysis.dispose()

    return 2


def main(argv=None) -> int:
    args = parse_args(argv)
    return asyncio.run(run(args, AppContainer()))


if __name__ == "__main__":
    sys.exit(main())
