import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from extractors.address_book import AddressBookError, load_address_book
from extractors.keyword_filter import FindCommand, parse_find_arguments
from outputs.exporters import export_records, format_person_list
from config_loader import load_settings

CURRENT_DIR = Path(__file__).resolve().parent

logger = logging.getLogger("addressbook")

EXPORT_FORMATS = {"json": "json", "csv": "csv", "xlsx": "excel", "xml": "xml"}
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Address book search by name, tag, phone or email"
    )
    sub = parser.add_subparsers(dest="command", required=True)
    find = sub.add_parser(
        FindCommand.COMMAND_WORD,
        help="Find persons matching any keyword (case-sensitive).",
        description=FindCommand.MESSAGE_USAGE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    find.add_argument("keywords", nargs="*", help="Keywords to match.")
    find.add_argument(
        "-a",
        "--address-book",
        required=True,
        help="Address book file (json, csv, xlsx, xml) or http(s) URL returning JSON.",
    )
    find.add_argument(
        "-s",
        "--settings",
        default=str(CURRENT_DIR / "config" / "settings.json"),
        help="Path to settings JSON (timeouts, headers, log level).",
    )
    find.add_argument(
        "-o",
        "--output",
        default=None,
        help="Export matches to this path (format inferred from extension).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(Path(args.settings))
    except (OSError, ValueError) as e:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("Failed to load settings from %s: %s", args.settings, e)
        return 2
    log_level = str(settings.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO), format=LOG_FORMAT)

    try:
        keywords = parse_find_arguments(" ".join(args.keywords))
    except ValueError as e:
        logger.error("%s", e)
        return 2

    out_fmt = None
    if args.output:
        ext = Path(args.output).suffix.lower().lstrip(".")
        out_fmt = EXPORT_FORMATS.get(ext)
        if out_fmt is None:
            logger.error("Cannot infer export format from %s", args.output)
            return 2

    try:
        address_book = load_address_book(
            args.address_book,
            timeout=float(settings.get("REQUEST_TIMEOUT", 15.0)),
            user_agent=str(settings.get("USER_AGENT")),
        )
    except AddressBookError as e:
        logger.error("Failed to load address book: %s", e)
        return 1

    result = FindCommand(keywords).execute(address_book)
    print(result.feedback_to_user)
    if result.relevant_persons:
        print(format_person_list(result.relevant_persons))

    if out_fmt:
        try:
            export_records(result.relevant_persons, Path(args.output).resolve(), out_fmt)
        except OSError as e:
            logger.error("Failed to export results to %s: %s", args.output, e)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
