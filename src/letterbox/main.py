"""Main module for the letterbox CLI."""

import argparse
import signal
import sys
import threading
from typing import Any, Dict, List, Optional

from . import __version__
from .core import BatchConfig, CancellationError, ConfigurationError, ItemProcessingError
from .core.observability import StructuredLogger
from .process_images import list_images, run_processing

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="letterbox",
        description="Letterbox - batch letterboxing of photographs to a fixed aspect ratio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Letterbox every JPEG/TIFF in the current directory to 16:9 on black
  letterbox process

  # White 1:1 letterbox with 10% padding, reprocessing everything
  letterbox process --white --aspect 1:1 --padding 10 --force photos/*.jpg

  # Show version
  letterbox version
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process", help="Letterbox images into the output directory"
    )
    process_parser.add_argument(
        "images",
        nargs="*",
        help="Images to process (default: JPEG and TIFF files in the current directory)",
    )
    process_parser.add_argument(
        "--output", default="processed", help="Image output directory"
    )
    process_parser.add_argument(
        "--white", action="store_true", help="Output a white letterbox"
    )
    process_parser.add_argument("--aspect", default="16:9", help="Output aspect ratio")
    process_parser.add_argument(
        "--quality", type=int, default=90, help="Output JPEG quality (0-100)"
    )
    process_parser.add_argument(
        "--padding", type=int, default=0, help="Output image padding in percent"
    )
    process_parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of images processed at once (default: CPU count)",
    )
    process_parser.add_argument(
        "--force", action="store_true", help="Reprocess images whose output is up to date"
    )
    process_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers.add_parser("version", help="Show version information")

    return parser


def config_from_args(args: argparse.Namespace) -> BatchConfig:
    """Build a validated BatchConfig from parsed ``process`` arguments."""
    options: Dict[str, Any] = {
        "output_directory": args.output,
        "background_is_white": args.white,
        "aspect_ratio": args.aspect,
        "quality": args.quality,
        "padding_percent": args.padding,
        "force": args.force,
    }
    if args.concurrency is not None:
        options["concurrency"] = args.concurrency
    return BatchConfig.create(**options)


def _install_interrupt_handler(cancel_event: threading.Event, logger: StructuredLogger):
    """Turn Ctrl-C into a cooperative cancel. Returns the previous handler."""
    if threading.current_thread() is not threading.main_thread():
        return None

    def _handler(signum, frame):
        logger.warning("Interrupt received, waiting for running images to finish")
        cancel_event.set()

    return signal.signal(signal.SIGINT, _handler)


def run_process(args: argparse.Namespace) -> int:
    """Execute the ``process`` command and return an exit code."""
    logger = StructuredLogger("letterbox", level="DEBUG" if args.debug else None)

    try:
        config = config_from_args(args)
    except ConfigurationError as exc:
        logger.error(str(exc))
        return EXIT_USAGE

    images: List[str] = args.images or list_images(".")
    if not images:
        logger.warning("No images found to process")
        return EXIT_OK

    cancel_event = threading.Event()
    previous_handler = _install_interrupt_handler(cancel_event, logger)
    try:
        run_processing(images, config, cancel_event, logger)
    except CancellationError as exc:
        logger.warning(f"Processing cancelled: {exc}")
        return EXIT_CANCELLED
    except ItemProcessingError as exc:
        logger.error(f"Processing failed ({exc.kind}): {exc}")
        return EXIT_FAILURE
    except OSError as exc:
        logger.error(f"Error creating output directory: {exc}")
        return EXIT_FAILURE
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the letterbox command-line interface."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "process":
        sys.exit(run_process(args))

    elif args.command == "version":
        print("Letterbox CLI")
        print(f"Version {__version__}")
        sys.exit(EXIT_OK)

    else:
        parser.print_help()
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
