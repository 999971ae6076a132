from __future__ import annotations

from pathlib import Path

from relpub.core.result import Err, Ok, Result
from relpub.services.publish.errors import PublishError
from relpub.services.publish.model import ReleaseRequest

_TRUE = frozenset({"true", "yes", "1", "on"})
_FALSE = frozenset({"false", "no", "0", "off"})


def parse_bool(value: str | None, *, default: bool) -> bool | None:
    """Parse a boolean-like CLI/CI string. Returns None if unrecognised."""
    if value is None or not value.strip():
        return default
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return None


def _missing(label: str, hint: str) -> Err[PublishError]:
    return Err(PublishError(kind="invalid_input", message=f"missing {label}", hint=hint))


def validate_request(
    *,
    name: str | None,
    target: str | None,
    bundle: str | None,
    prerelease: str | None,
    cwd: Path,
) -> Result[ReleaseRequest, PublishError]:
    """Check the four publisher inputs before any remote call is made.

    ``bundle`` is resolved against ``cwd`` and must be an existing file.
    """
    name = (name or "").strip()
    target = (target or "").strip()
    bundle = (bundle or "").strip()

    if not name:
        return _missing("release name", "Pass the release tag, e.g. v1.2.0.")
    if not target:
        return _missing("target ref", "Pass the branch or tag to release from.")
    if not bundle:
        return _missing("artifact bundle", "Pass the path to the zipped artifacts.")

    flag = parse_bool(prerelease, default=True)
    if flag is None:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"invalid prerelease flag: {prerelease}",
                hint="Use true or false.",
            )
        )

    path = Path(bundle)
    if not path.is_absolute():
        path = cwd / path
    if not path.is_file():
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"artifact bundle not found: {bundle}",
                hint=str(path),
            )
        )

    return Ok(ReleaseRequest(name=name, target=target, bundle=path, prerelease=flag))
