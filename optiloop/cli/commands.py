# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the optiloop CLI.

Each function corresponds to one subcommand, takes the parsed argparse
namespace and returns an exit code. No print() calls except for the final
result summary of `run`; everything else goes through the structured logger.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from optiloop.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR, VALIDATION_ERROR
from optiloop.config.exceptions import ConfigError
from optiloop.config.loader import load_config
from optiloop.config.schema import DocsConfig, OptiloopConfig
from optiloop.core.errors import OptimizationError
from optiloop.logging.logger import get_logger
from optiloop.runtime.bootstrap import bootstrap, set_deterministic_seed
from optiloop.utils.paths import resolve_project_root, resolve_under_root


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, OptiloopConfig | None, logging.Logger, Path]:
    """
    The shared setup every command needs: load config, run bootstrap.

    Returns (exit_code, config, logger, project_root). If exit_code is not
    SUCCESS the caller returns it immediately.
    """
    logger = get_logger(f"optiloop.cli.{command_name}", log_level=args.log_level)
    project_root = resolve_project_root()

    config = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger, project_root

    if config is not None:
        project_root = bootstrap(config.global_config, project_root)
    else:
        logger.debug(
            "No config provided, running with defaults",
            extra={"command": command_name},
        )

    if args.seed is not None:
        set_deterministic_seed(args.seed)

    return SUCCESS, config, logger, project_root


def _docs_config(config: OptiloopConfig | None) -> DocsConfig:
    if config is not None and config.docs is not None:
        return config.docs
    return DocsConfig()


def handle_run(args: argparse.Namespace) -> int:
    """Run the optimization described by the config."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "run")
    if exit_code != SUCCESS:
        return exit_code

    if config is None or config.problem is None:
        logger.error("`run` needs a config with a 'problem' section", extra={"command": "run"})
        return USER_ERROR

    from optiloop.runner import build_executor

    executor = None
    try:
        executor = build_executor(config, project_root)
        if args.dry_run:
            logger.info(
                "Dry run — executor assembled, not running",
                extra={"solver": executor.solver.NAME, "observers": len(executor.observers)},
            )
            return SUCCESS

        result = executor.run()
    except (OptimizationError, ValueError) as err:
        logger.error("Optimization failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR
    finally:
        if executor is not None:
            executor.observers.close()

    logger.info("Run finished", extra=result.summary())
    if args.json:
        sys.stdout.write(json.dumps(result.summary(), default=str) + "\n")
    else:
        sys.stdout.write(str(result) + "\n")
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Log environment and config info."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS:
        return exit_code

    from optiloop import __version__
    from optiloop.runtime.environment import get_system_info
    from optiloop.testfunctions import list_test_functions

    info = get_system_info()
    logger.info(
        "optiloop info",
        extra={
            "version": __version__,
            **info.as_log_extra(),
            "project_root": str(project_root),
            "test_functions": list_test_functions(),
            "config_loaded": config is not None,
        },
    )
    return SUCCESS


def handle_implementors(args: argparse.Namespace) -> int:
    """Collect implementor records and write the JSON manifests."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "implementors")
    if exit_code != SUCCESS:
        return exit_code

    from optiloop.docs.implementors import build_default_manifest, register_implementors, write_manifest

    try:
        manifest = build_default_manifest()
        for records in manifest.values():
            register_implementors(records)

        count = sum(len(r) for r in manifest.values())
        if args.dry_run:
            logger.info("Dry run — manifests not written", extra={"traits": len(manifest), "records": count})
            return SUCCESS

        out_dir = Path(args.output) if args.output else resolve_under_root(
            _docs_config(config).implementors_directory, project_root
        )
        written = write_manifest(manifest, out_dir)
    except ValueError as err:
        logger.error("Invalid implementor record", extra={"error": str(err)})
        return VALIDATION_ERROR
    except OSError as err:
        logger.error("Could not write manifests", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    logger.info("Implementor manifests complete", extra={"files": len(written), "records": count})
    return SUCCESS


def handle_harness(args: argparse.Namespace) -> int:
    """Regenerate the pytest harness for the book's code samples."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "harness")
    if exit_code != SUCCESS:
        return exit_code

    from optiloop.docs.harness import generate_harness

    docs = _docs_config(config)
    book_dir = Path(args.book) if args.book else resolve_under_root(docs.book_directory, project_root)
    out_dir = Path(args.output) if args.output else resolve_under_root(docs.harness_directory, project_root)

    if args.dry_run:
        logger.info("Dry run — harness not generated", extra={"book": str(book_dir), "output": str(out_dir)})
        return SUCCESS

    try:
        result = generate_harness(book_dir, out_dir)
    except FileNotFoundError as err:
        logger.error("Book not found", extra={"error": str(err)})
        return USER_ERROR
    except ValueError as err:
        logger.error("Conflicting book chapters", extra={"error": str(err)})
        return USER_ERROR
    except OSError as err:
        logger.error("Harness generation failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    logger.info(
        "Harness ready",
        extra={"modules": len(result.written), "samples": result.samples, "output": str(out_dir)},
    )
    return SUCCESS


def handle_workflow(args: argparse.Namespace) -> int:
    """Validate the book CI workflow file."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "workflow")
    if exit_code != SUCCESS:
        return exit_code

    from optiloop.ci.workflow import WorkflowError, check_book_workflow, load_workflow

    path = Path(args.file) if args.file else resolve_under_root(_docs_config(config).workflow_file, project_root)
    try:
        workflow = load_workflow(path)
        check_book_workflow(workflow)
    except WorkflowError as err:
        logger.error("Workflow invalid", extra={"path": str(path), "error": str(err)})
        return VALIDATION_ERROR

    logger.info(
        "Workflow valid",
        extra={"path": str(path), "triggers": list(workflow.triggers), "steps": [s.name for s in workflow.jobs[0].steps]},
    )
    return SUCCESS
