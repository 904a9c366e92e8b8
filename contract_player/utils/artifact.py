import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import structlog
from starknet_py.common import (
    create_casm_class,
    create_compiled_contract,
    create_sierra_compiled_contract,
)
from starknet_py.hash.casm_class_hash import compute_casm_class_hash
from starknet_py.hash.class_hash import compute_class_hash
from starknet_py.hash.sierra_class_hash import compute_sierra_class_hash

from contract_player.exceptions.config import ArtifactFileError, ArtifactFileMissing
from contract_player.utils.formatting import to_hex

log = structlog.get_logger(__name__)


class ArtifactKind(Enum):
    LEGACY = "legacy"
    SIERRA = "sierra"


@dataclass(frozen=True)
class ContractArtifact:
    """A compiled contract class, ready to be declared.

    `compiled_contract` is the artifact's JSON text as read from disk.
    `compiled_class_hash` is only set for Sierra classes.
    """

    path: Path
    kind: ArtifactKind
    compiled_contract: str
    class_hash: int
    compiled_class_hash: Optional[int] = None


def _read(path: Path) -> str:
    try:
        text = path.read_text()
    except FileNotFoundError as e:
        raise ArtifactFileMissing(f"Contract artifact {path} does not exist!") from e
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        raise ArtifactFileError(f"Contract artifact {path} is not valid JSON!") from e
    return text


def load_artifact(path: Path, casm_path: Optional[Path] = None) -> ContractArtifact:
    """Load a contract artifact and compute its class hash.

    Legacy (Cairo 0) artifacts are recognized by their ``program`` key, Sierra
    artifacts by ``sierra_program``. The latter need `casm_path` as well, the
    compiled class hash is part of their declaration.

    :raises ArtifactFileMissing: if a file does not exist.
    :raises ArtifactFileError: if a file is corrupted or of an unknown layout.
    """
    text = _read(path)
    keys = json.loads(text).keys()

    if "sierra_program" in keys:
        if casm_path is None:
            raise ArtifactFileError(f"Sierra artifact {path} requires a compiled CASM file")
        casm_text = _read(casm_path)
        try:
            class_hash = compute_sierra_class_hash(create_sierra_compiled_contract(text))
            compiled_class_hash = compute_casm_class_hash(create_casm_class(casm_text))
        except (KeyError, TypeError, ValueError) as e:
            raise ArtifactFileError(f"Cannot compute class hash of {path}: {e}") from e
        artifact = ContractArtifact(
            path, ArtifactKind.SIERRA, text, class_hash, compiled_class_hash
        )
    elif "program" in keys:
        try:
            class_hash = compute_class_hash(create_compiled_contract(compiled_contract=text))
        except (KeyError, TypeError, ValueError) as e:
            raise ArtifactFileError(f"Cannot compute class hash of {path}: {e}") from e
        artifact = ContractArtifact(path, ArtifactKind.LEGACY, text, class_hash)
    else:
        raise ArtifactFileError(f"{path} is neither a legacy nor a Sierra contract artifact")

    log.info(
        "Loaded contract artifact",
        path=str(path),
        kind=artifact.kind.value,
        class_hash=to_hex(artifact.class_hash),
    )
    return artifact
