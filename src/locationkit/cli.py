"""
locationkit CLI entrypoint.

Quick local lookups without writing code. All location logic is delegated to
`locationkit.location.manager.LocationManager`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import httpx

from locationkit.config.settings import get_settings
from locationkit.core.logging import configure_logging
from locationkit.domain.errors import LocationError
from locationkit.domain.models import AddressComponent, AddressLookup
from locationkit.location.manager import LocationManager, build_location_manager

EXIT_PERMISSION_DENIED = 2


def _print_address(address: AddressComponent, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(address.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return
    lines = [address.address1, address.address2, address.city, address.state, address.postal_code, address.country]
    print(", ".join(p for p in lines if p) or "(no address details)")
    print(f"  coordinate: {address.latitude},{address.longitude}  country_code: {address.country_code or '-'}")


def _print_lookup(lookup: AddressLookup, *, as_json: bool) -> int:
    if lookup.is_permission_denied or lookup.address is None:
        if as_json:
            print(json.dumps(lookup.model_dump(mode="json"), ensure_ascii=False, indent=2))
        else:
            print("Location permission denied.", file=sys.stderr)
        return EXIT_PERMISSION_DENIED
    _print_address(lookup.address, as_json=as_json)
    return 0


def _load_addresses(path: str) -> list[AddressComponent]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of addresses")
    return [AddressComponent.model_validate(item) for item in data]


async def _cmd_gps(manager: LocationManager, args: argparse.Namespace) -> int:
    return _print_lookup(await manager.get_address_from_gps(), as_json=args.json)


async def _cmd_coords(manager: LocationManager, args: argparse.Namespace) -> int:
    lookup = await manager.get_address_from_coordinates(float(args.lat), float(args.long))
    return _print_lookup(lookup, as_json=args.json)


async def _cmd_decode(manager: LocationManager, args: argparse.Namespace) -> int:
    _print_address(await manager.decode_address(args.address), as_json=args.json)
    return 0


async def _cmd_rank(manager: LocationManager, args: argparse.Namespace) -> int:
    ranked = await manager.get_address_with_distance(_load_addresses(args.addresses))
    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in ranked], ensure_ascii=False, indent=2))
        return 0
    for i, item in enumerate(ranked, start=1):
        a = item.address
        label = ", ".join(p for p in (a.address1, a.city, a.country) if p) or f"{a.latitude},{a.longitude}"
        print(f"{i:>2}. {item.distance_km:10.3f} km  {label}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the locationkit CLI."""
    parser = argparse.ArgumentParser(prog="locationkit")
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    parser.add_argument("--log-level", default=None, help="Override app.log_level (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    gps = sub.add_parser("gps", help="Address of the current device position (permission-gated).")
    gps.set_defaults(func=_cmd_gps)

    coords = sub.add_parser("coords", help="Address of an explicit coordinate (permission-gated).")
    coords.add_argument("--lat", required=True, type=float)
    coords.add_argument("--long", required=True, type=float)
    coords.set_defaults(func=_cmd_coords)

    dec = sub.add_parser("decode", help="Forward-geocode a free-text address.")
    dec.add_argument("address")
    dec.set_defaults(func=_cmd_decode)

    rank = sub.add_parser("rank", help="Rank addresses nearest-first from the current position.")
    rank.add_argument("--addresses", required=True, help="JSON file with a list of address objects")
    rank.set_defaults(func=_cmd_rank)
    return parser


def main(argv: list[str] | None = None, *, manager: LocationManager | None = None) -> int:
    """CLI entrypoint callable used by `python -m locationkit.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    manager = manager or build_location_manager(get_settings())
    func: Any = getattr(args, "func")
    try:
        return int(asyncio.run(func(manager, args)))
    except (LocationError, httpx.HTTPError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
