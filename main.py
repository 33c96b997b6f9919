"""
main.py
CLI entry point for the Dry Bulk Matching Engine.

Usage:
  python main.py demo
  python main.py extract --text "Looking for Supramax 58k dwt ..."
  python main.py extract --file email.txt
  python main.py match   --text "..." --pool listings.json [--radius 600]
  python main.py api
"""
import argparse
import json
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

# Ensure project root is on sys.path when running directly
sys.path.insert(0, str(Path(__file__).parent))

# ── Reference broker message and listing pool ─────────────────────────────────
SAMPLE_EMAIL = (
    "Good morning,\n"
    "Looking for Supramax 58k dwt from Santos to Qingdao, laycan 10-15 March, "
    "rate 14.5k/day. Vessel must be geared, max 15 years.\n"
    "Cargo: soybeans.\n"
)

SAMPLE_POOL = [
    {"id": "L-001", "vessel_name": "SKY PEARL", "vessel_type": "Supramax", "dwt": 57_800,
     "build_year": 2014, "open_port": "Santos", "load_port": "Santos", "discharge_port": "Qingdao",
     "freight_rate": 14.2, "gear": "geared", "cargo_type": "soybeans", "flag": "Panama"},
    {"id": "L-002", "vessel_name": "OCEAN GRACE", "vessel_type": "Ultramax", "dwt": 63_500,
     "build_year": 2016, "open_port": "Paranagua", "load_port": "Paranagua", "discharge_port": "Qingdao",
     "freight_rate": 15.6, "gear": "geared", "cargo_type": "grain", "flag": "Liberia",
     "status": "pending"},
    {"id": "L-003", "vessel_name": "PACIFIC DAWN", "vessel_type": "Panamax", "dwt": 76_000,
     "build_year": 2012, "open_port": "Santos", "load_port": "Santos", "discharge_port": "Rizhao",
     "freight_rate": 14.0, "gear": "gearless", "cargo_type": "soybeans", "flag": "Marshall Islands"},
    {"id": "L-004", "vessel_name": "STAR ALPHA", "vessel_type": "Supramax", "dwt": 56_000,
     "build_year": 2018, "open_port": "Santos", "load_port": "Santos", "discharge_port": "Qingdao",
     "freight_rate": 14.5, "gear": "geared", "cargo_type": "soybeans", "flag": "Malta",
     "status": "fixed"},
    {"id": "L-005", "vessel_name": "NORD WIND", "vessel_type": "Supramax", "dwt": 58_500,
     "build_year": 2011, "open_port": "Rio Grande", "load_port": "Rio Grande", "discharge_port": "Tianjin",
     "freight_rate": 13.9, "gear": "geared", "cargo_type": "soybean meal", "flag": "Greece"},
    {"id": "L-006", "vessel_name": "IRON DUKE", "vessel_type": "Supramax", "dwt": 59_000,
     "build_year": 2015, "open_port": "Rotterdam", "load_port": "Santos", "discharge_port": "Qingdao",
     "freight_rate": 16.5, "gear": "geared", "cargo_type": "soybeans", "flag": "Cyprus"},
]

# Listing laycan as day offsets from the requested laycan start
LAYCAN_OFFSETS = {
    "L-001": (1, 4),
    "L-002": (3, 8),
    "L-003": (0, 5),
    "L-004": (0, 3),
    "L-005": (-4, -1),
    "L-006": (2, 6),
}


def sample_pool(anchor: datetime) -> list:
    from requirement_extractor.models import VesselListing
    pool = []
    for item in SAMPLE_POOL:
        start, end = LAYCAN_OFFSETS[item["id"]]
        pool.append(VesselListing(
            **item,
            laycan_start=anchor + timedelta(days=start),
            laycan_end=anchor + timedelta(days=end),
        ))
    return pool


def load_pool(path: str) -> list:
    """Read a JSON array of listings; dates may be ISO-8601 strings."""
    from api.models import ListingIn
    items = json.loads(Path(path).read_text())
    return [ListingIn(**item).to_listing() for item in items]


def _read_text(text: Optional[str], file: Optional[str]) -> str:
    if file:
        return Path(file).read_text()
    return text or ""


def _requirement_table(req):
    from rich import box
    from rich.table import Table

    from requirement_extractor.models import CONFIDENCE_KEYS

    table = Table(title=f"Extracted Requirement — {req.id}", box=box.ROUNDED)
    table.add_column("Field", style="cyan", width=24)
    table.add_column("Value", width=32)
    table.add_column("Confidence", justify="right", style="yellow", width=12)

    scores = req.confidence_scores or {}
    for name in req.populated_fields():
        value = getattr(req, name)
        if isinstance(value, datetime):
            value = value.strftime("%d %b %Y")
        elif isinstance(value, float):
            value = f"{value:,.2f}".rstrip("0").rstrip(".")
        conf = scores.get(CONFIDENCE_KEYS[name])
        table.add_row(name, str(value), f"{conf:.0%}" if conf is not None else "—")
    return table


def _results_table(title: str, results, requirement=None):
    from rich import box
    from rich.table import Table

    from matching_engine.engine import listing_proximity

    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("#", justify="right", width=3)
    table.add_column("Vessel", style="cyan", width=16)
    table.add_column("Type", width=10)
    table.add_column("DWT", justify="right", width=9)
    table.add_column("Open", width=12)
    table.add_column("Rate k/day", justify="right", width=10)
    table.add_column("Score", justify="right", style="green", width=8)
    if requirement is not None:
        table.add_column("Proximity", justify="right", width=9)

    for i, r in enumerate(results, 1):
        lst = r.listing
        row = [
            str(i),
            lst.vessel_name,
            lst.vessel_type,
            f"{lst.dwt:,.0f}" if lst.dwt is not None else "—",
            lst.position_port or "—",
            f"{lst.freight_rate:.2f}" if lst.freight_rate is not None else "—",
            f"{r.score:.1f}",
        ]
        if requirement is not None:
            row.append(str(listing_proximity(lst, requirement)))
        table.add_row(*row)
    return table


# Demo mode

def run_demo(radius_nm: Optional[float] = None) -> None:
    from rich.console import Console

    from guardrails.guardrail_layer import GuardrailLayer
    from matching_engine.engine import MatchingEngine
    from matching_engine.ranking import RankingPreferences, RankingWeights, rank_listings
    from requirement_extractor.extractor import RequirementExtractor

    console = Console()
    console.print("\n[bold blue]═══ DRY BULK MATCHING ENGINE — DEMO ═══[/bold blue]\n")
    console.print("[bold]Broker message:[/bold]")
    console.print(f"[dim]{SAMPLE_EMAIL}[/dim]")

    req = RequirementExtractor().extract(SAMPLE_EMAIL)
    console.print(_requirement_table(req))

    anchor = req.laycan_start or datetime.now()
    pool = sample_pool(anchor)
    engine = MatchingEngine()
    guardrail = GuardrailLayer()

    results = engine.find_matching_listings(req, pool, radius_nm=radius_nm)
    gr_report = guardrail.validate_matches(req, results, engine.threshold_pct, engine.result_limit)

    console.print()
    if results:
        console.print(_results_table(f"Best Matches ({len(results)} of {len(pool)} listings)", results, req))
    else:
        console.print("[yellow]No listings cleared the acceptance threshold.[/yellow]")

    console.print(f"\n  [bold]Confidence Score:[/bold] {gr_report['confidence_score']:.0%}")
    status_str = "[green]PASSED[/green]" if gr_report["passed"] else "[red]FLAGGED[/red]"
    console.print(f"  [bold]Guardrail Status:[/bold] {status_str}")
    for w in gr_report.get("warnings", []):
        console.print(f"  [yellow]⚠  {w}[/yellow]")

    # Breakdown
    console.print("\n  [bold]Score Breakdown:[/bold]")
    for r in results:
        console.print(f"\n  [{r.listing.vessel_name}]  {r.score:.1f}%")
        for dim, pts in r.breakdown.items():
            console.print(f"    • {dim:<24} {pts:>5.1f}")

    # Preference ranking over the whole pool
    prefs = RankingPreferences(
        preferred_ports=["Santos", "Paranagua"],
        max_vessel_age=12,
        min_vessel_size=55_000,
        max_vessel_size=64_000,
        target_laycan=anchor,
        budget_max=req.target_rate,
    )
    weights = RankingWeights(vessel_age=0.10)
    ranked = rank_listings(pool, weights, prefs)
    console.print()
    console.print(_results_table("Preference Ranking (whole pool)", ranked))
    console.print()


# Extract mode

def run_extract(text: Optional[str], file: Optional[str]) -> None:
    from rich.console import Console

    from requirement_extractor.extractor import extract_requirement

    req = extract_requirement(_read_text(text, file))
    Console().print(_requirement_table(req))


# Match mode

def run_match(text: Optional[str], file: Optional[str], pool_path: str,
              radius_nm: Optional[float] = None) -> None:
    from rich.console import Console

    from matching_engine.engine import find_matching_listings
    from requirement_extractor.extractor import extract_requirement

    console = Console()
    req = extract_requirement(_read_text(text, file))
    pool = load_pool(pool_path)
    console.print(_requirement_table(req))

    results = find_matching_listings(req, pool, radius_nm=radius_nm)
    if not results:
        console.print("[yellow]No listings cleared the acceptance threshold.[/yellow]")
        return
    console.print(_results_table(f"Best Matches ({len(results)} of {len(pool)} listings)", results, req))


# ── API mode ──────────────────────────────────────────────────────────────────

def run_api() -> None:
    import uvicorn
    from config.settings import settings
    from monitoring import start_metrics_server

    start_metrics_server()
    uvicorn.run(
        "api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dry bulk vessel–cargo matching engine")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Run the sample message against the sample pool")
    demo.add_argument("--radius", type=float, default=None, help="Proximity radius in NM")

    extract = sub.add_parser("extract", help="Extract a requirement from free text")
    src = extract.add_mutually_exclusive_group(required=True)
    src.add_argument("--text")
    src.add_argument("--file")

    match = sub.add_parser("match", help="Match a free-text requirement against a JSON pool")
    msrc = match.add_mutually_exclusive_group(required=True)
    msrc.add_argument("--text")
    msrc.add_argument("--file")
    match.add_argument("--pool", required=True, help="JSON array of listings")
    match.add_argument("--radius", type=float, default=None, help="Proximity radius in NM")

    sub.add_parser("api", help="Serve the REST API")
    return parser


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.command == "demo":
        run_demo(args.radius)
    elif args.command == "extract":
        run_extract(args.text, args.file)
    elif args.command == "match":
        run_match(args.text, args.file, args.pool, args.radius)
    elif args.command == "api":
        run_api()


if __name__ == "__main__":
    main()
