"""CLI entry point for single-file conversions."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from docshift.core.credentials import default_credential_store
from docshift.core.logging import configure_logger

from .capabilities import Capabilities
from .config import (
    CollisionPolicy,
    ConfigOverrides,
    ConvertConfigError,
    LoadResult,
    load_config,
)
from .errors import ConversionError, ResourceLimitError, UnsupportedPathError
from .formats import (
    allowed_targets,
    file_extension,
    is_supported_pair,
    parse_format,
    resolve_format,
)
from .models import ConversionRequest
from .session import ConversionSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docshift convert",
        description=(
            "Convert one document, image, or data file into another format."
        ),
        epilog=(
            "Run `docshift formats` to list supported pairs and `docshift "
            "init` to scaffold convert.toml."
        ),
    )
    parser.add_argument("path", type=Path, help="File to convert.")
    parser.add_argument(
        "--to",
        required=True,
        dest="target",
        help="Target format name, extension, or media type (e.g. pdf, .xlsx).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for the converted file (defaults to the workspace).",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing output file with the same name.",
    )
    parser.add_argument(
        "--version-output",
        action="store_true",
        help="Write name-01.ext, name-02.ext, ... when the output exists.",
    )
    parser.add_argument(
        "--model",
        help="Model used for AI-assisted conversions.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Attempt the conversion even if the pair is not listed as supported.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG and echo log records to stderr.",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    capabilities: Optional[Capabilities] = None,
    client_factory=None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.overwrite and args.version_output:
        parser.error("--overwrite and --version-output are mutually exclusive.")

    overrides = ConfigOverrides(
        output_dir=args.output_dir,
        collision=_collision_from_args(args),
        model=args.model,
        log_level=args.log_level,
    )
    try:
        loaded = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except ConvertConfigError as exc:
        parser.error(str(exc))

    logger, log_path = configure_logger(
        "docshift.convert",
        log_dir=loaded.layout.path_for("logs"),
        level=loaded.config.log_level,
        verbose=args.verbose,
    )
    logger.debug("convert CLI invoked", extra={"argv": list(argv or [])})

    try:
        return _run(
            args,
            loaded=loaded,
            logger=logger,
            capabilities=capabilities,
            client_factory=client_factory,
        )
    except (ConversionError, OSError) as exc:
        logger.error(
            "Conversion failed",
            extra={"path": args.path, "error": type(exc).__name__},
            exc_info=True,
        )
        sys.stderr.write(f"error: {exc}\n")
        sys.stderr.write(f"log file: {log_path}\n")
        return 1


def _run(
    args: argparse.Namespace,
    *,
    loaded: LoadResult,
    logger: logging.Logger,
    capabilities: Optional[Capabilities],
    client_factory,
) -> int:
    config = loaded.config
    source_path: Path = args.path.expanduser()
    if not source_path.is_file():
        raise ConversionError(f"Input file not found: {source_path}")

    size = source_path.stat().st_size
    if size > config.max_input_bytes:
        raise ResourceLimitError(
            "Input is {0:.1f} MB; the limit is {1:.0f} MB.".format(
                size / (1024 * 1024), config.max_input_bytes / (1024 * 1024)
            )
        )

    source = resolve_format(None, source_path.name)
    target = parse_format(args.target)
    if not args.force and not is_supported_pair(source, target):
        choices = ", ".join(
            file_extension(fmt).lstrip(".") for fmt in allowed_targets(source)
        )
        raise UnsupportedPathError(
            f"Cannot convert {source.name} to {target.name}. "
            f"Supported targets: {choices or 'none'}. Use --force to try anyway."
        )

    request = ConversionRequest(
        data=source_path.read_bytes(),
        source=source,
        filename=source_path.name,
        target=target,
    )
    destination = resolve_output_path(
        config.output_dir / request.output_filename(),
        collision=config.collision,
    )
    if destination is None:
        logger.info(
            "Skipped existing output",
            extra={"output": config.output_dir / request.output_filename()},
        )
        sys.stdout.write(
            "Skipped: {0} already exists (collision policy 'skip').\n".format(
                config.output_dir / request.output_filename()
            )
        )
        return 0

    options = {
        "credentials": default_credential_store(loaded.layout),
        "settings": config.ai,
        "max_input_bytes": config.max_input_bytes,
    }
    if capabilities is not None:
        options["capabilities"] = capabilities
    if client_factory is not None:
        options["client_factory"] = client_factory

    with ConversionSession(options=options, logger=logger) as session:
        handle = session.run(request)
        handle.save_to(destination)

    logger.info(
        "Conversion written",
        extra={"output": destination, "bytes": handle.size},
    )
    sys.stdout.write(f"Converted {source_path.name} -> {destination}\n")
    return 0


def resolve_output_path(
    base: Path, *, collision: CollisionPolicy
) -> Optional[Path]:
    """Return where to write ``base``, or ``None`` when it must be skipped."""

    if not base.exists() or collision is CollisionPolicy.OVERWRITE:
        return base
    if collision is CollisionPolicy.SKIP:
        return None
    counter = 1
    while True:
        candidate = base.with_name(f"{base.stem}-{counter:02d}{base.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def _collision_from_args(args: argparse.Namespace) -> CollisionPolicy | None:
    if args.overwrite:
        return CollisionPolicy.OVERWRITE
    if args.version_output:
        return CollisionPolicy.VERSION
    return None


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
