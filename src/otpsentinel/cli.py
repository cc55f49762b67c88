"""Typer-based command line interface for OTP detection.

``detect`` runs the detector on a piece of sample text, which is useful to
check whether codes from a given service will be picked up.  ``clear`` wipes
the clipboard and ``rules`` prints or initialises the OTP rules file.

Exit codes
----------
0 success
1 no code detected
3 clipboard error
4 configuration error
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
import yaml

from .clipboard import get_clipboard_manager
from .config import OTPRules, default_rules, load_rules, rules_to_yaml, save_rules
from .detect import DetectionContext, OTPDetector
from .utils.durations import format_duration
from .utils.errors import ClipboardError, ConfigurationError
from .utils.logging import configure_logging

if not sys.stdout.isatty():  # pragma: no cover - CLI test context
    os.environ.setdefault("NO_COLOR", "1")
    os.environ.setdefault("RICH_DISABLE_NO_COLOR", "1")

LOW_CONFIDENCE = 0.8
DEFAULT_TEST_SENDER = "test@example.com"

app = typer.Typer(
    name="otpsentinel",
    help="Detect one-time passcodes in email text. Use 'otpsentinel detect' to try a sample.",
)
rules_app = typer.Typer(help="Inspect or create the OTP rules file.")
app.add_typer(rules_app, name="rules")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_exit(code: int, msg: str | None = None) -> NoReturn:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""

    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


def _load(config_path: Path | None) -> OTPRules:
    try:
        return load_rules(config_path)
    except (ConfigurationError, OSError) as exc:
        _safe_exit(4, str(exc).splitlines()[0])


def _copy_and_wait(code: str, rules: OTPRules, verbose: bool) -> None:
    manager = get_clipboard_manager()
    try:
        manager.copy(code)
    except ClipboardError as exc:
        _safe_exit(3, str(exc))
    typer.echo("Copied to clipboard")

    delay = rules.clipboard_auto_clear
    manager.schedule_auto_clear(delay)
    if verbose:
        typer.echo(f"Clipboard clears in {format_duration(delay)}", err=True)
    try:
        manager.wait_until_idle()
    except KeyboardInterrupt:
        pass
    finally:
        try:
            manager.clear(force=manager.auto_clear_failure() is not None)
        except ClipboardError as exc:
            _safe_exit(3, str(exc))
    typer.echo("Clipboard cleared")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main() -> None:
    """Entry point for the otpsentinel command group."""
    pass


@app.command()
def detect(
    text: str = typer.Argument(..., help="Email subject or body text to test"),  # noqa: B008
    sender: str = typer.Option(  # noqa: B008
        DEFAULT_TEST_SENDER, "--sender", help="Sender address used for trust boosts"
    ),
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--rules", help="YAML rules file to override defaults"
    ),
    copy: Optional[bool] = typer.Option(  # noqa: B008
        None,
        "--copy/--no-copy",
        help="Copy the code and hold it until the auto-clear fires",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Emit debug logging to stderr"
    ),
) -> None:
    """Test OTP extraction on ``text`` used as subject, snippet and body."""

    if verbose:
        configure_logging(verbose=True)
    rules = _load(config_path)
    try:
        detector = OTPDetector(rules)
    except ConfigurationError as exc:
        _safe_exit(4, str(exc))

    context = DetectionContext(subject=text, body=text, snippet=text, sender=sender)
    result = detector.detect(context)
    if result is None:
        typer.echo("No OTP code detected")
        typer.echo("Codes are recognised in phrases like 'code: 123456' or 'your code is 123456'")
        _safe_exit(1)

    typer.echo(f"OTP detected: {result.code}")
    typer.echo(f"Confidence: {result.confidence:.2f}")
    typer.echo(f"Pattern: {result.pattern_name}")
    typer.echo(f"Source: {result.source.value}")
    if result.confidence < LOW_CONFIDENCE:
        typer.echo("Low confidence: the code may be incorrectly extracted")

    should_copy = rules.auto_copy_to_clipboard if copy is None else copy
    if should_copy:
        _copy_and_wait(result.code, rules, verbose)


@app.command()
def clear() -> None:
    """Empty the clipboard."""

    try:
        get_clipboard_manager().clear(force=True)
    except ClipboardError as exc:
        _safe_exit(3, str(exc))
    typer.echo("Clipboard cleared")


@rules_app.command("show")
def rules_show(
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--rules", help="YAML rules file to override defaults"
    ),
) -> None:
    """Print the effective OTP rules."""

    rules = _load(config_path)
    typer.echo(rules_to_yaml(rules), nl=False)


@rules_app.command("init")
def rules_init(
    path: Path = typer.Argument(..., help="Where to write the rules file"),  # noqa: B008
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),  # noqa: B008
) -> None:
    """Write the default OTP rules to ``path``."""

    if path.exists() and not force:
        _safe_exit(4, f"{path} already exists; pass --force to overwrite")
    try:
        save_rules(path, default_rules())
    except (OSError, yaml.YAMLError) as exc:
        _safe_exit(4, str(exc))
    typer.echo(f"Wrote {path}")


if __name__ == "__main__":  # pragma: no cover
    app()
