# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structural checks for GitHub Actions workflow files.

The runner executes steps in order and aborts the job on the first failing
step; all we verify here is that a workflow file is a well-formed step
sequence, and that the book workflow has the expected shape:

  - triggered on push and pull_request
  - one job with four ordered steps: checkout, cache, generate harness,
    test code samples
  - an environment variable that forces coloured tool output

Note that YAML 1.1 (and therefore PyYAML) reads a bare `on` key as the
boolean True; both spellings are accepted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


class WorkflowError(Exception):
    """The file is not a valid workflow step sequence."""


@dataclass(frozen=True)
class Step:
    name: str
    uses: Optional[str] = None
    run: Optional[str] = None
    working_directory: Optional[str] = None
    with_: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Job:
    id: str
    name: str
    runs_on: str
    steps: tuple[Step, ...]


@dataclass(frozen=True)
class Workflow:
    name: str
    triggers: tuple[str, ...]
    env: dict[str, str]
    jobs: tuple[Job, ...]


def _triggers(raw: dict[Any, Any]) -> tuple[str, ...]:
    on = raw.get("on", raw.get(True))
    if on is None:
        raise WorkflowError("Workflow has no 'on' triggers")
    if isinstance(on, str):
        return (on,)
    if isinstance(on, list):
        return tuple(str(t) for t in on)
    if isinstance(on, dict):
        return tuple(str(t) for t in on)
    raise WorkflowError(f"Unsupported 'on' value: {on!r}")


def _mapping(value: Any, what: str) -> dict[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise WorkflowError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _parse_step(job_id: str, index: int, raw: Any) -> Step:
    if not isinstance(raw, dict):
        raise WorkflowError(f"Step {index} of job '{job_id}' is not a mapping")
    uses, run = raw.get("uses"), raw.get("run")
    if uses is None and run is None:
        raise WorkflowError(f"Step {index} of job '{job_id}' has neither 'uses' nor 'run'")
    return Step(
        name=str(raw.get("name", uses or run)),
        uses=uses,
        run=run,
        working_directory=raw.get("working-directory"),
        with_=dict(_mapping(raw.get("with"), f"'with' of step {index} in job '{job_id}'")),
    )


def parse_workflow(raw: Any) -> Workflow:
    """
    Validate an already-parsed workflow document.

    Raises:
        WorkflowError: On any structural problem.
    """
    if not isinstance(raw, dict):
        raise WorkflowError("Workflow must be a YAML mapping")

    triggers = _triggers(raw)

    raw_jobs = raw.get("jobs")
    if not isinstance(raw_jobs, dict) or not raw_jobs:
        raise WorkflowError("Workflow defines no jobs")

    jobs: list[Job] = []
    for job_id, raw_job in raw_jobs.items():
        if not isinstance(raw_job, dict):
            raise WorkflowError(f"Job '{job_id}' is not a mapping")
        raw_steps = raw_job.get("steps")
        if not isinstance(raw_steps, list) or not raw_steps:
            raise WorkflowError(f"Job '{job_id}' has no steps")
        steps = tuple(_parse_step(job_id, i, s) for i, s in enumerate(raw_steps))
        jobs.append(
            Job(
                id=str(job_id),
                name=str(raw_job.get("name", job_id)),
                runs_on=str(raw_job.get("runs-on", "")),
                steps=steps,
            )
        )

    env = {str(k): str(v) for k, v in _mapping(raw.get("env"), "'env'").items()}
    return Workflow(name=str(raw.get("name", "")), triggers=triggers, env=env, jobs=tuple(jobs))


def load_workflow(path: Path) -> Workflow:
    """
    Read and validate a workflow file.

    Raises:
        WorkflowError: If the file is missing, isn't YAML or isn't a valid step sequence.
    """
    if not path.is_file():
        raise WorkflowError(f"Workflow file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as err:
        raise WorkflowError(f"Invalid YAML in {path}: {err}") from err
    return parse_workflow(raw)


_COLOR_VARS = ("PY_COLORS", "FORCE_COLOR", "CARGO_TERM_COLOR")


def check_book_workflow(workflow: Workflow) -> None:
    """
    Check the book workflow's shape.

    Raises:
        WorkflowError: Describing the first mismatch found.
    """
    for trigger in ("push", "pull_request"):
        if trigger not in workflow.triggers:
            raise WorkflowError(f"Book workflow must trigger on '{trigger}'")

    if len(workflow.jobs) != 1:
        raise WorkflowError(f"Book workflow must have exactly one job, found {len(workflow.jobs)}")

    steps = workflow.jobs[0].steps
    if len(steps) != 4:
        raise WorkflowError(f"Book workflow job must have four steps, found {len(steps)}")

    checkout, cache, generate, test = steps
    if not (checkout.uses or "").startswith("actions/checkout"):
        raise WorkflowError("First step must check out the repository")
    if not (cache.uses or "").startswith("actions/cache"):
        raise WorkflowError("Second step must restore the dependency cache")
    if not generate.run or "harness" not in generate.run:
        raise WorkflowError("Third step must generate the book harness")
    if not test.run or "pytest" not in test.run:
        raise WorkflowError("Fourth step must run the code sample tests")

    if not any(var in workflow.env for var in _COLOR_VARS):
        raise WorkflowError("Book workflow must force coloured output via env")
