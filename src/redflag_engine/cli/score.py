"""
Command-line interface for red-flag scoring and briefing.

Reads messages from a JSON array or a JSONL file, scores them, clusters them
into topics and prints the briefing as JSON.

Usage:
    # Briefing to stdout
    redflag-score messages.json

    # With registries, written to a file
    redflag-score messages.jsonl --vips vips.json --contacts contacts.json \\
        --events events.json --output briefing.json

    # Module form
    python -m redflag_engine.cli.score messages.json --max-topics 5
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter

from ..briefing import BriefingData, build_briefing
from ..logging_config import get_logger, setup_logging
from ..models.message import CalendarEvent, Message
from ..models.registry import Contact, VipEntry
from ..pipeline import RedFlagPipeline


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# ============================================================================
# INPUT / OUTPUT
# ============================================================================

def read_records(path: Path) -> List[Any]:
    """
    Read a JSON array or JSONL file into a list of records.

    Args:
        path: Input file

    Returns:
        Parsed records

    Raises:
        ValueError: On malformed JSON or a top-level value that is not a list
    """
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []

    if text.startswith("["):
        records = json.loads(text)
        if not isinstance(records, list):
            raise ValueError(f"{path}: expected a JSON array")
        return records

    return [json.loads(line) for line in text.splitlines() if line.strip()]


def load_models(path: Optional[Path], model: Type[ModelT]) -> List[ModelT]:
    """Validate the records of an optional file as ``model`` instances."""
    if path is None:
        return []
    return TypeAdapter(List[model]).validate_python(read_records(path))


def write_output(briefing: BriefingData, output_path: Optional[Path]) -> None:
    """
    Write the briefing as indented JSON.

    Args:
        briefing: Briefing to write
        output_path: Output file (default: stdout)
    """
    payload = briefing.model_dump_json(indent=2)

    if not output_path:
        print(payload)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n", encoding="utf-8")

    logger.info("output_written", path=str(output_path), topics=len(briefing.topics))


# ============================================================================
# MAIN CLI
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redflag-score",
        description="Score email messages for red flags and build a topic briefing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s messages.json
  %(prog)s messages.jsonl --vips vips.json --output briefing.json
  %(prog)s messages.json --events events.json --max-topics 5 --verbose
        """,
    )

    parser.add_argument("input", type=str, help="JSON array or JSONL file of messages")
    parser.add_argument(
        "--output", "-o", type=str, default=None, help="Output file path (default: stdout)"
    )
    parser.add_argument("--vips", type=str, default=None, help="JSON/JSONL file of VIP entries")
    parser.add_argument("--contacts", type=str, default=None, help="JSON/JSONL file of contacts")
    parser.add_argument("--events", type=str, default=None, help="JSON/JSONL file of calendar events")
    parser.add_argument(
        "--max-topics", "-n", type=int, default=None, help="Maximum topics (default: from settings)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    # Logs go to stderr so stdout stays valid JSON
    setup_logging(log_level="DEBUG" if args.verbose else None, stream=sys.stderr)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    def optional_path(value: Optional[str]) -> Optional[Path]:
        return Path(value) if value else None

    try:
        messages = load_models(input_path, Message)
        pipeline = RedFlagPipeline.from_registries(
            vips=load_models(optional_path(args.vips), VipEntry),
            contacts=load_models(optional_path(args.contacts), Contact),
            events=load_models(optional_path(args.events), CalendarEvent),
        )

        briefing = build_briefing(messages, pipeline=pipeline, max_topics=args.max_topics)
        write_output(briefing, optional_path(args.output))

    except (OSError, ValueError) as e:
        logger.error("cli_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(
            f"Scored {briefing.total_messages} messages, {briefing.total_flagged} flagged, "
            f"{len(briefing.topics)} topics",
            file=sys.stderr,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
