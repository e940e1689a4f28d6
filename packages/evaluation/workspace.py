from __future__ import annotations

import logging
import shutil
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

PROVENANCE_FILE_NAME = "ImageProvenance.json"
POLICY_FILE_NAME = "Policies.rego"
RESULT_FILE_NAME = "Output.txt"

logger = logging.getLogger("policy_evaluator.workspace")


@dataclass(frozen=True, slots=True)
class Workspace:
    root: Path
    policy_path: Path
    provenance_path: Path
    result_path: Path


def workspace_path(base_dir: Path, invocation_id: uuid.UUID) -> Path:
    return Path(base_dir) / f"Policy-{invocation_id.hex}"


def stage(base_dir: Path, invocation_id: uuid.UUID, policy_text: str, provenance_document: str) -> Workspace:
    """Create the invocation's directory and write both inputs into it.

    The directory must not exist yet; a collision or any write failure raises
    `OSError` and leaves nothing behind.
    """
    root = workspace_path(base_dir, invocation_id)
    root.mkdir(parents=True, exist_ok=False)
    workspace = Workspace(
        root=root,
        policy_path=root / POLICY_FILE_NAME,
        provenance_path=root / PROVENANCE_FILE_NAME,
        result_path=root / RESULT_FILE_NAME,
    )
    try:
        workspace.provenance_path.write_text(provenance_document, encoding="utf-8")
        workspace.policy_path.write_text(policy_text, encoding="utf-8")
    except BaseException:
        destroy(workspace)
        raise
    return workspace


def destroy(workspace: Workspace) -> None:
    try:
        shutil.rmtree(workspace.root)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("failed to remove workspace %s: %s", workspace.root, exc)


@contextmanager
def staged_workspace(
    base_dir: Path,
    invocation_id: uuid.UUID,
    policy_text: str,
    provenance_document: str,
) -> Iterator[Workspace]:
    workspace = stage(base_dir, invocation_id, policy_text, provenance_document)
    try:
        yield workspace
    finally:
        destroy(workspace)
