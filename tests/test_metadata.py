import tomllib

import pytest

from chainvet.genesis.metadata import ValidationMetadata, load_validation_inputs

META = """
genesis_creation_commit = "ba493e94a25df0f646a040c0899bfd0f4d237c06"
node_version = "18.12.1"
monorepo_build_command = "pnpm"
genesis_creation_command = "forge1"
"""


def _chain(root, name, text=META):
    d = root / name
    d.mkdir()
    (d / "meta.toml").write_text(text)
    return d


def test_from_dict_reads_fields():
    meta = ValidationMetadata.from_dict(tomllib.loads(META))
    assert meta.genesis_creation_commit == "ba493e94a25df0f646a040c0899bfd0f4d237c06"
    assert meta.monorepo_build_command == "pnpm"
    assert meta.genesis_creation_command == "forge1"


def test_from_dict_defaults_to_empty():
    assert ValidationMetadata.from_dict({}) == ValidationMetadata()


def test_from_dict_rejects_non_string():
    with pytest.raises(ValueError):
        ValidationMetadata.from_dict({"node_version": 18})


def test_load_skips_files_and_test_dirs(tmp_path):
    _chain(tmp_path, "10")
    _chain(tmp_path, "1301", 'genesis_creation_command = "opnode1"\n')
    _chain(tmp_path, "10-test")
    (tmp_path / "README.md").write_text("notes")
    inputs = load_validation_inputs(tmp_path)
    assert sorted(inputs) == [10, 1301]
    assert inputs[1301].genesis_creation_command == "opnode1"
    assert inputs[10] == ValidationMetadata.from_dict(tomllib.loads(META))


def test_bad_directory_name_raises(tmp_path):
    _chain(tmp_path, "not-a-chain")
    with pytest.raises(ValueError):
        load_validation_inputs(tmp_path)


def test_missing_meta_raises(tmp_path):
    (tmp_path / "10").mkdir()
    with pytest.raises(FileNotFoundError):
        load_validation_inputs(tmp_path)


def test_invalid_toml_in_test_dir_still_raises(tmp_path):
    _chain(tmp_path, "5-test", "this is = = not toml")
    with pytest.raises(tomllib.TOMLDecodeError):
        load_validation_inputs(tmp_path)