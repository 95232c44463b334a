import logging
from enum import IntEnum
from pathlib import Path
from typing import List, Optional

import typer

from src.analyzers import AnalyzerPool, build_pool
from src.codes import CodeRegistry, build_default_registry
from src.config import DEFAULT_ARTIFACT_ROOT, DEFAULT_REPORT_ROOT
from src.evaluation import Tester, write_report
from src.forest import OptunaForestTuner
from src.profiles import Trainer, load_artifact

app = typer.Typer()
logger = logging.getLogger("main")


class ExitCode(IntEnum):
    FATAL_ERROR = 1
    NO_PROFILE = 2
    NO_TRAINING = 3
    NO_TESTING = 4
    NO_ANALYZERS = 5
    MISSING_ANALYZER = 6
    MISSING_PROFILE = 7


def _exit(message: str, reason: ExitCode) -> None:
    logger.error("Exiting on error [%d]: %s", int(reason), message)
    raise typer.Exit(code=int(reason))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _profile_name(name: Optional[str]) -> str:
    name = (name or "").strip().lower()
    if not name:
        _exit("No profile name specified.", ExitCode.NO_PROFILE)
    return name


def _load_pool(specs: List[str], registry: CodeRegistry) -> AnalyzerPool:
    logger.info("Initializing analyzers.")
    try:
        pool = build_pool(specs, registry)
    except (ImportError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--analyzer") from exc
    if not len(pool):
        _exit("No analyzers are available.", ExitCode.NO_ANALYZERS)
    return pool


def _run_tests(
    name: str,
    analyzer,
    pool: AnalyzerPool,
    registry: CodeRegistry,
    test_file: Path,
    raw: bool,
    report_root: Path,
) -> None:
    tester = Tester(name, analyzer, pool, registry, test_file)
    run = tester.run()
    write_report(run, report_root, output_raw=raw)


@app.command()
def train(
    name: Optional[str] = typer.Option(None, "--name", help="Profile name (lower-cased)."),
    train_file: Optional[Path] = typer.Option(None, "--train", help="Training index file."),
    require: List[str] = typer.Option([], "--require", help="Analyzer ids the profile depends on."),
    test_file: Optional[Path] = typer.Option(None, "--test", help="Optional held-out index to test with."),
    analyzer: List[str] = typer.Option(
        [],
        "--analyzer",
        help="Upstream analyzer as id=module:factory; repeat for each analyzer.",
    ),
    export_matrices: bool = typer.Option(False, "--export-matrices", help="Write training matrices as CSV."),
    raw: bool = typer.Option(False, "--raw", help="Include per-record results in the test report."),
    artifact_root: Path = typer.Option(DEFAULT_ARTIFACT_ROOT, "--artifact-root", file_okay=False),
    report_root: Path = typer.Option(DEFAULT_REPORT_ROOT, "--report-root", file_okay=False),
    tune: bool = typer.Option(False, "--tune", help="Tune each forest with Optuna before fitting."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """
    Train the encoding, language and script forests and package them as a profile.
    """
    _configure_logging(verbose)
    profile_name = _profile_name(name)
    if train_file is None or not train_file.exists():
        _exit(f"Could not find training input file: {train_file}", ExitCode.NO_TRAINING)
    if test_file is not None and not test_file.exists():
        logger.warning("Could not find testing input file: %s", test_file)
        test_file = None

    registry = build_default_registry()
    pool = _load_pool(analyzer, registry)
    required = [analyzer_id.strip() for analyzer_id in require if analyzer_id.strip()]
    if not required:
        logger.warning("No required analyzers specified; using every available analyzer.")
        required = pool.ids()
    for analyzer_id in required:
        if analyzer_id not in pool:
            _exit(f"Required analyzer not available: {analyzer_id}", ExitCode.MISSING_ANALYZER)

    try:
        trainer = Trainer(
            profile_name,
            pool,
            registry,
            required,
            train_file,
            artifact_root=artifact_root,
            export_matrices=export_matrices,
            tuner_factory=OptunaForestTuner if tune else None,
        )
        forest_analyzer = trainer.run()
        if test_file is not None:
            _run_tests(profile_name, forest_analyzer, pool, registry, test_file, raw, report_root)
    except Exception as exc:
        logger.exception("Fatal error: %s", exc)
        _exit(str(exc), ExitCode.FATAL_ERROR)
    finally:
        pool.dispose()


@app.command()
def test(
    name: Optional[str] = typer.Option(None, "--name", help="Profile name to test."),
    test_file: Optional[Path] = typer.Option(None, "--test", help="Labeled index file to test with."),
    analyzer: List[str] = typer.Option(
        [],
        "--analyzer",
        help="Upstream analyzer as id=module:factory; repeat for each analyzer.",
    ),
    raw: bool = typer.Option(False, "--raw", help="Include per-record results in the report."),
    artifact_root: Path = typer.Option(DEFAULT_ARTIFACT_ROOT, "--artifact-root", file_okay=False),
    report_root: Path = typer.Option(DEFAULT_REPORT_ROOT, "--report-root", file_okay=False),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """
    Score a trained profile, the voting composite and every analyzer on a labeled index.
    """
    _configure_logging(verbose)
    profile_name = _profile_name(name)
    if test_file is None or not test_file.exists():
        _exit(f"Could not find testing input file: {test_file}", ExitCode.NO_TESTING)

    registry = build_default_registry()
    pool = _load_pool(analyzer, registry)
    try:
        try:
            _, forest_analyzer = load_artifact(artifact_root, profile_name, pool)
        except FileNotFoundError:
            _exit(f"The specified profile is not available: {profile_name}", ExitCode.MISSING_PROFILE)
        except RuntimeError as exc:
            _exit(str(exc), ExitCode.MISSING_ANALYZER)
        _run_tests(profile_name, forest_analyzer, pool, registry, test_file, raw, report_root)
    except typer.Exit:
        raise
    except Exception as exc:
        logger.exception("Fatal error: %s", exc)
        _exit(str(exc), ExitCode.FATAL_ERROR)
    finally:
        pool.dispose()


if __name__ == "__main__":
    app()
