"""
Command line entry point for blink-search.

This module is the error boundary of the application: it maps every
BlinkError to a message on stderr and an exit code. Cancelling the
selection is a normal, successful exit.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config.parser import (
    create_config_template,
    default_config_path,
    example_config,
    load_config
)
from .config.resolver import resolve_location
from .errors import BlinkError, ConfigError, LocationError, SelectorError, TraversalError
from .session.cache import PathCache
from .session.controller import SelectionSession
from .tools.fd_walker import create_walker
from .tools.fzf import FzfSelector
from .tools.opener import open_path


logger = logging.getLogger(__name__)

LOG_FILE_NAME = "blink.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="blink",
        description="A fuzzy finder to quickly locate files or folders from a list of configured locations."
    )
    parser.add_argument(
        "location",
        nargs="?",
        help="Location to search. Accepts unique abbreviations. "
             "If not specified, the first location in the config is used."
    )
    parser.add_argument(
        "-c", "--create-cache",
        action="store_true",
        help="Write all files or folders of the location to stdout. Useful for automating cache creation."
    )
    parser.add_argument(
        "-l", "--list-locations",
        action="store_true",
        help="List all available locations."
    )
    parser.add_argument(
        "-g", "--get-config-path",
        action="store_true",
        help="Print the config path."
    )
    parser.add_argument(
        "-r", "--refresh",
        action="store_true",
        help="Regenerate the cache file of the location before searching."
    )
    parser.add_argument(
        "--open-path",
        metavar="PATH",
        help="Directly open PATH inside the location. Useful for scripting."
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Use FILE instead of the default configuration file."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Also write log messages to stderr."
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser


def setup_logging(log_dir: Path, verbose: bool = False) -> None:
    """
    Log everything to ``blink.log`` in ``log_dir``, and to stderr when verbose.

    A log file that cannot be opened only costs the log, never the search.
    """
    package_logger = logging.getLogger("blink")
    for handler in list(package_logger.handlers):
        if getattr(handler, '_blink_handler', False):
            package_logger.removeHandler(handler)
            handler.close()

    package_logger.setLevel(logging.DEBUG)
    handlers: List[logging.Handler] = []

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding='utf-8'))
    except OSError as e:
        print(f"Warning: cannot open log file in {log_dir}: {e}", file=sys.stderr)

    if verbose:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(logging.INFO)
        handlers.append(stream_handler)

    for handler in handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._blink_handler = True
        package_logger.addHandler(handler)


def _print_setup_guidance(hint: str) -> None:
    print(hint)
    print("Example config with some locations:")
    print(example_config())
    print()


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run blink-search.

    Args:
        argv: Command line arguments, ``sys.argv[1:]`` when None

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    config_path = Path(args.config).expanduser() if args.config else default_config_path()

    if args.get_config_path:
        print(config_path)
        return EXIT_SUCCESS

    setup_logging(config_path.parent, verbose=args.verbose)
    logger.debug(f"Command line: {sys.argv if argv is None else argv}")

    try:
        parse_result = load_config(config_path)
    except ConfigError as e:
        logger.error(str(e))
        return _error(str(e))

    if parse_result.is_first_run:
        print(f"Creating new config file: {config_path}")
        try:
            create_config_template(config_path)
        except ConfigError as e:
            logger.warning(str(e))

    registry = parse_result.registry

    if args.list_locations:
        for line in registry.display_lines():
            print(line)
        return EXIT_SUCCESS

    if registry.is_empty():
        _print_setup_guidance(parse_result.hint)
        return EXIT_SUCCESS

    try:
        location = resolve_location(args.location, registry, str(config_path))
    except LocationError as e:
        logger.error(str(e))
        return _error(str(e))

    config = parse_result.config
    cache = PathCache(create_walker(config.fd_flags))

    if args.create_cache:
        logger.debug(f"Creating cache for {location.name}")
        try:
            paths = cache.generate(location)
        except TraversalError as e:
            logger.error(str(e))
            return _error(str(e))
        for path in paths:
            print(path)
        return EXIT_SUCCESS

    if args.open_path:
        target = str(Path(location.path) / args.open_path.strip())
        logger.debug(f"execute --open-path={args.open_path} with location {location.name}")
        try:
            open_path(target)
        except BlinkError as e:
            return _error(str(e))
        return EXIT_SUCCESS

    selector = FzfSelector(
        history_dir=config_path.parent,
        extra_flags=config.fzf_flags,
        config_path=config_path if args.config else None
    )
    session = SelectionSession(registry, cache, selector, config_path=config_path)

    try:
        result = session.run(location.name, force_refresh=args.refresh)
    except SelectorError as e:
        logger.error(str(e))
        return _error(str(e))
    except LocationError as e:
        return _error(str(e))

    if result.failed:
        return _error(result.diagnostic)

    if not result.accepted:
        return EXIT_SUCCESS

    logger.debug(f"Opening: {result.path}")
    try:
        open_path(result.path)
    except BlinkError as e:
        return _error(str(e))
    return EXIT_SUCCESS


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
