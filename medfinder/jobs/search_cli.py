"""CLI job to search for nearby medical professionals and optionally save them."""

import argparse
import logging
from typing import Optional, Sequence

from medfinder.core.config import ConfigError, get_settings
from medfinder.core.db import save_professionals
from medfinder.core.search import build_search
from medfinder.core.session import SearchSession
from medfinder.models import FilterConfig, FilteredResults, MedicalProfessional, SearchParams
from medfinder.vendors.google_maps import GoogleMapsError

logger = logging.getLogger(__name__)


def format_professional(professional: MedicalProfessional) -> str:
    distance = f"{professional.distance:.1f} km" if professional.distance is not None else "n/a"
    return (
        f"{professional.name} | {professional.workplace} | {professional.phone} | "
        f"{professional.address} | {distance}"
    )


def build_filter_config(args: argparse.Namespace) -> FilterConfig:
    settings = get_settings()
    defaults = () if args.no_default_keywords else settings.default_excluded_keywords
    exclude_empty = settings.default_exclude_empty_fields and not args.keep_empty
    config = FilterConfig(exclude_empty_fields=exclude_empty, excluded_keywords=defaults)
    for keyword in args.exclude_keywords or []:
        config = config.with_keyword(keyword)
    for keyword in args.allow_keywords or []:
        config = config.without_keyword(keyword)
    return config


def run_search_job(args: argparse.Namespace) -> FilteredResults:
    params = SearchParams(address=args.address, radius=args.radius, specialty=args.specialty)
    params.validate()

    session = SearchSession(build_search().search, config=build_filter_config(args))
    session.search(params)
    view = session.set_term(args.term) if args.term else session.view()
    logger.info(
        "Search finished: total=%d included=%d excluded=%d",
        len(session.results),
        len(view.included),
        len(view.excluded),
    )

    for professional in view.included:
        print(format_professional(professional))
    if args.show_excluded and view.excluded:
        print(f"\nExcluded ({len(view.excluded)}):")
        for professional in view.excluded:
            print(format_professional(professional))

    if args.save and view.included:
        result = session.save_selected([p.record_key for p in view.included], save_professionals)
        if result.success:
            logger.info("Saved %d professionals", len(result.data))
        else:
            logger.error("Saving failed: %s", result.error)
    return view


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find medical professionals near an address")
    parser.add_argument("--address", required=True, help="Address to search around")
    parser.add_argument("--radius", type=float, default=10.0, help="Search radius in miles")
    parser.add_argument("--specialty", required=True, help="Specialty keyword, e.g. cardiologist")
    parser.add_argument("--keep-empty", action="store_true", help="Keep records with empty fields")
    parser.add_argument(
        "--exclude-keyword",
        dest="exclude_keywords",
        action="append",
        help="Exclude records whose name, address or workplace contains this keyword (repeatable)",
    )
    parser.add_argument(
        "--no-default-keywords",
        action="store_true",
        help="Do not apply the configured default excluded keywords",
    )
    parser.add_argument(
        "--allow-keyword",
        dest="allow_keywords",
        action="append",
        help="Drop this keyword from the excluded keywords (repeatable)",
    )
    parser.add_argument("--filter", dest="term", default="", help="Quick filter term for the included results")
    parser.add_argument("--show-excluded", action="store_true", help="Also print excluded records")
    parser.add_argument("--save", action="store_true", help="Save the included records to the database")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run_search_job(args)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except ValueError as exc:
        parser.error(str(exc))
    except GoogleMapsError as exc:
        logger.error("An error occurred while searching: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
