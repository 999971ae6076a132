from __future__ import annotations

from pathlib import Path

import pytest

from relpub.core.result import Err, Ok
from relpub.services.publish.inputs import parse_bool, validate_request
from relpub.services.publish.model import ReleaseRequest


@pytest.fixture
def bundle(tmp_path: Path) -> Path:
    path = tmp_path / "bundle.zip"
    path.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
    return path


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("TRUE", True),
        (" yes ", True),
        ("1", True),
        ("false", False),
        ("No", False),
        ("0", False),
        ("off", False),
        ("", True),
        (None, True),
        ("maybe", None),
    ],
)
def test_parse_bool(raw: str | None, expected: bool | None) -> None:
    assert parse_bool(raw, default=True) is expected


def test_valid_request(tmp_path: Path, bundle: Path) -> None:
    result = validate_request(
        name=" v1.0.0 ", target="main", bundle="bundle.zip", prerelease="false", cwd=tmp_path
    )
    expected = ReleaseRequest(name="v1.0.0", target="main", bundle=bundle, prerelease=False)
    assert result == Ok(expected)


def test_prerelease_defaults_to_true(tmp_path: Path, bundle: Path) -> None:
    result = validate_request(
        name="v1.0.0", target="main", bundle=str(bundle), prerelease=None, cwd=tmp_path
    )
    assert isinstance(result, Ok)
    assert result.value.prerelease is True


@pytest.mark.parametrize(
    ("name", "target", "bundle_arg", "label"),
    [
        ("", "main", "bundle.zip", "release name"),
        ("  ", "main", "bundle.zip", "release name"),
        ("v1", None, "bundle.zip", "target ref"),
        ("v1", "main", "", "artifact bundle"),
    ],
)
def test_missing_inputs_are_named(
    tmp_path: Path, bundle: Path, name: str, target: str | None, bundle_arg: str, label: str
) -> None:
    result = validate_request(
        name=name, target=target, bundle=bundle_arg, prerelease="true", cwd=tmp_path
    )
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
    assert result.error.message == f"missing {label}"


def test_name_checked_first(tmp_path: Path) -> None:
    result = validate_request(name=None, target=None, bundle=None, prerelease=None, cwd=tmp_path)
    assert isinstance(result, Err)
    assert result.error.message == "missing release name"


def test_invalid_prerelease_flag(tmp_path: Path, bundle: Path) -> None:
    result = validate_request(
        name="v1", target="main", bundle=str(bundle), prerelease="sometimes", cwd=tmp_path
    )
    assert isinstance(result, Err)
    assert "prerelease" in result.error.message


def test_bundle_must_exist(tmp_path: Path) -> None:
    result = validate_request(
        name="v1", target="main", bundle="missing.zip", prerelease="true", cwd=tmp_path
    )
    assert isinstance(result, Err)
    assert result.error.message == "artifact bundle not found: missing.zip"


def test_bundle_must_be_a_file(tmp_path: Path) -> None:
    (tmp_path / "dist").mkdir()
    result = validate_request(
        name="v1", target="main", bundle="dist", prerelease="true", cwd=tmp_path
    )
    assert isinstance(result, Err)
