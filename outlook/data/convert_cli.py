"""CLI for converting a saved probabilistic forecast into a categorical outlook.

Usage:
    python -m outlook.data.convert_cli forecast.json
    python -m outlook.data.convert_cli forecast.json -o categorical.geojson
    python -m outlook.data.convert_cli forecast.json --sweep-threshold 0 -v
"""

import argparse
import logging
import sys

from outlook.config import settings
from outlook.data.geojson import dump_geojson, load_forecast_file
from outlook.engine.conversion import ConversionService
from outlook.errors import OutlookError
from outlook.models.outlook import OutlookSnapshot
from outlook.models.tiers import CategoricalTier, Hazard


def print_summary(snapshot: OutlookSnapshot) -> None:
    print(f"\n{'=' * 60}")
    print(f"  Categorical Outlook (generation {snapshot.generation})")
    print(f"{'=' * 60}")
    for hazard in Hazard:
        tagged = snapshot.hazard_polygons.get(hazard, ())
        print(f"  {hazard.value:>8}: {len(tagged)} area(s)")
    print()

    if snapshot.is_empty:
        print("  No categorical risk.")
        print()
        return

    for tier in sorted(CategoricalTier, reverse=True):
        regions = snapshot.regions_for(tier)
        if not regions:
            continue
        area = sum(r.area for r in regions)
        print(f"  [{tier.label:>4}]  {len(regions)} region(s)  area {area:,.4f}  {tier.display_name}")
        for region in regions:
            srcs = ", ".join(f"{s.hazard.value} {s.literal}" for s in region.sorted_sources())
            print(f"          from {srcs}")
    print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Probabilistic to categorical outlook converter")
    parser.add_argument("forecast", help="Saved forecast JSON file")
    parser.add_argument("-o", "--output", help="Write categorical GeoJSON to this path")
    parser.add_argument(
        "--sweep-threshold", type=int, default=None,
        help=f"Segments above which the arrangement overlay is used (default: {settings.sweep_threshold})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    service = ConversionService(sweep_threshold=args.sweep_threshold)
    try:
        hazard_sets = load_forecast_file(args.forecast, validator=service.validator)
        snapshot = service.recompute(hazard_sets)
    except OutlookError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: cannot read {args.forecast}: {e}", file=sys.stderr)
        return 1

    print_summary(snapshot)
    if args.output:
        dump_geojson(snapshot, args.output)
        print(f"  Wrote {len(snapshot.regions)} feature(s) to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
