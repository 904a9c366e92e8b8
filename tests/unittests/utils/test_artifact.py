import json
from unittest.mock import patch

import pytest

from contract_player.exceptions.config import ArtifactFileError, ArtifactFileMissing
from contract_player.utils.artifact import ArtifactKind, load_artifact

artifact_import_path = "contract_player.utils.artifact"


@pytest.fixture
def legacy_file(tmp_path):
    path = tmp_path.joinpath("ERC20.json")
    path.write_text(json.dumps({"abi": [], "entry_points_by_type": {}, "program": {}}))
    return path


@pytest.fixture
def sierra_files(tmp_path):
    sierra = tmp_path.joinpath("erc20.contract_class.json")
    sierra.write_text(json.dumps({"sierra_program": [], "abi": []}))
    casm = tmp_path.joinpath("erc20.compiled_contract_class.json")
    casm.write_text(json.dumps({"bytecode": []}))
    return sierra, casm


class TestLoadArtifact:
    @patch(f"{artifact_import_path}.compute_class_hash", return_value=0xABC)
    @patch(f"{artifact_import_path}.create_compiled_contract", return_value="compiled")
    def test_legacy_artifact(self, mock_create, mock_hash, legacy_file):
        artifact = load_artifact(legacy_file)

        assert artifact.kind is ArtifactKind.LEGACY
        assert artifact.class_hash == 0xABC
        assert artifact.compiled_class_hash is None
        assert artifact.compiled_contract == legacy_file.read_text()
        mock_create.assert_called_once_with(compiled_contract=legacy_file.read_text())
        mock_hash.assert_called_once_with("compiled")

    @patch(f"{artifact_import_path}.compute_casm_class_hash", return_value=0xCA5)
    @patch(f"{artifact_import_path}.create_casm_class", return_value="casm")
    @patch(f"{artifact_import_path}.compute_sierra_class_hash", return_value=0x51E)
    @patch(f"{artifact_import_path}.create_sierra_compiled_contract", return_value="sierra")
    def test_sierra_artifact_with_casm(self, _, __, ___, ____, sierra_files):
        sierra, casm = sierra_files
        artifact = load_artifact(sierra, casm)

        assert artifact.kind is ArtifactKind.SIERRA
        assert artifact.class_hash == 0x51E
        assert artifact.compiled_class_hash == 0xCA5

    def test_sierra_artifact_requires_casm(self, sierra_files):
        sierra, _ = sierra_files
        with pytest.raises(ArtifactFileError, match="CASM"):
            load_artifact(sierra)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ArtifactFileMissing):
            load_artifact(tmp_path.joinpath("nope.json"))

    def test_missing_casm_file_raises(self, sierra_files, tmp_path):
        sierra, _ = sierra_files
        with pytest.raises(ArtifactFileMissing):
            load_artifact(sierra, tmp_path.joinpath("nope.json"))

    def test_corrupted_file_raises(self, tmp_path):
        path = tmp_path.joinpath("broken.json")
        path.write_text("{not json")
        with pytest.raises(ArtifactFileError):
            load_artifact(path)

    def test_unknown_layout_raises(self, tmp_path):
        path = tmp_path.joinpath("other.json")
        path.write_text(json.dumps({"bytecode": []}))
        with pytest.raises(ArtifactFileError, match="neither"):
            load_artifact(path)

    @patch(f"{artifact_import_path}.create_compiled_contract", side_effect=KeyError("program"))
    def test_hash_failure_is_an_artifact_error(self, _, legacy_file):
        with pytest.raises(ArtifactFileError):
            load_artifact(legacy_file)
