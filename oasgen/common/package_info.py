"""Package metadata used to fill the spec's ``info`` block."""

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
from pydantic import BaseModel, ValidationError

from oasgen.core.exceptions import PackageInfoError

logger = structlog.get_logger(__name__)


class PackageInfo(BaseModel):
    """Name, version, license and description of the documented package."""

    name: Optional[str] = None
    version: Optional[str] = None
    license: Optional[str] = None
    description: Optional[str] = None


def _license_name(value: Any) -> Optional[str]:
    # pyproject: "MIT" or {text = "MIT"}; package.json: "MIT" or {"type": "MIT"}
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        name = value.get("text") or value.get("type")
        return str(name) if name else None
    return None


def _parse(path: Path) -> Dict[str, Any]:
    if path.suffix == ".toml":
        with open(path, "rb") as f:
            data = tomllib.load(f)
        project = data.get("project")
        return project if isinstance(project, dict) else {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, dict) else {}


def load_package_info(path: Union[str, Path]) -> PackageInfo:
    """
    Read package metadata from pyproject.toml or a package.json-style file.

    A missing file is tolerated and yields empty metadata.

    Raises:
        PackageInfoError: If the file exists but cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        logger.warning("package_info_missing", path=str(path))
        return PackageInfo()

    try:
        data = _parse(path)
    except (OSError, ValueError) as e:
        # tomllib.TOMLDecodeError and json.JSONDecodeError are ValueErrors
        raise PackageInfoError(path, e) from e

    try:
        info = PackageInfo(
            name=data.get("name"),
            version=str(data["version"]) if data.get("version") else None,
            license=_license_name(data.get("license")),
            description=data.get("description"),
        )
    except ValidationError as e:
        raise PackageInfoError(path, e) from e
    logger.debug("package_info_loaded", path=str(path), name=info.name, version=info.version)
    return info


def build_info(package: PackageInfo, spec_url: str, base_url_path: str = "") -> Dict[str, Any]:
    """
    Build the spec ``info`` block.

    Example:
        >>> build_info(PackageInfo(name="shop", version="1.2.0"), "/api-spec")
        {'title': 'shop', 'version': '1.2.0', 'description': '[Specification JSON](/api-spec)'}
    """
    info: Dict[str, Any] = {}
    if package.name:
        info["title"] = package.name
    if package.version:
        info["version"] = package.version
    if package.license:
        info["license"] = {"name": package.license}

    description = f"[Specification JSON]({spec_url})"
    if base_url_path:
        description += f" , base url : {base_url_path}"
    if package.description:
        description += f"\n\n{package.description}"
    info["description"] = description
    return info
