"""Resolve Cargo manifests into a flat list of binary and example targets.

Workspaces are expanded with an explicit work-list: each visited manifest
contributes its own products first, then its members in declaration order.
Members ending in ``/*`` expand to every immediate subdirectory.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ManifestInvalid, ManifestMissing
from .targets import Binary, Example, Target

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "Cargo.toml"
WILDCARD_SUFFIX = "/*"


@dataclass(frozen=True)
class Product:
    """One ``[[bin]]`` or ``[[example]]`` entry after defaults are applied."""

    name: str
    path: str


@dataclass
class Manifest:
    """The parts of ``Cargo.toml`` target discovery needs."""

    directory: Path
    package_name: str | None = None
    package: dict = field(default_factory=dict)
    bins: list[Product] = field(default_factory=list)
    examples: list[Product] = field(default_factory=list)
    members: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


def _read_toml(path: Path) -> dict:
    if not path.is_file():
        raise ManifestMissing(path)
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestInvalid(path, str(exc)) from exc
    except OSError as exc:
        raise ManifestInvalid(path, f"unreadable: {exc.strerror or exc}") from exc


def _table(data: dict, key: str, path: Path) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ManifestInvalid(path, f"[{key}] must be a table")
    return value


def _string_list(table: dict, key: str, path: Path, context: str) -> list[str]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ManifestInvalid(path, f"{context}.{key} must be an array of strings")
    return list(value)


def _declared_products(data: dict, key: str, path: Path) -> list[tuple[str, str | None]]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ManifestInvalid(path, f"[[{key}]] must be an array of tables")
    declared: list[tuple[str, str | None]] = []
    for item in value:
        name = item.get("name", "")
        product_path = item.get("path")
        if not isinstance(name, str) or not (product_path is None or isinstance(product_path, str)):
            raise ManifestInvalid(path, f"[[{key}]] name and path must be strings")
        declared.append((name, product_path))
    return declared


def _find_workspace_manifest(directory: Path) -> Path | None:
    """Return the nearest manifest at or above ``directory`` declaring ``[workspace]``."""
    for candidate_dir in (directory, *directory.resolve().parents):
        candidate = candidate_dir / MANIFEST_FILENAME
        if not candidate.is_file():
            continue
        try:
            data = _read_toml(candidate)
        except ManifestInvalid:
            continue
        if isinstance(data.get("workspace"), dict):
            return candidate
    return None


def _inherit_package_fields(package: dict, directory: Path, manifest_path: Path) -> dict:
    """Replace ``{ workspace = true }`` package fields with ``[workspace.package]`` values."""
    inherited = [key for key, value in package.items() if isinstance(value, dict) and value.get("workspace") is True]
    if not inherited:
        return package
    workspace_manifest = _find_workspace_manifest(directory)
    if workspace_manifest is None:
        raise ManifestInvalid(manifest_path, "inherits from a workspace but no workspace root was found")
    workspace_data = _read_toml(workspace_manifest)
    workspace_package = _table(_table(workspace_data, "workspace", workspace_manifest), "package", workspace_manifest)
    completed = dict(package)
    for key in inherited:
        if key not in workspace_package:
            raise ManifestInvalid(manifest_path, f"package.{key} is not defined in [workspace.package]")
        completed[key] = workspace_package[key]
    return completed


def _sorted_listing(directory: Path) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as exc:
        logger.warning("Skipping product discovery in %s: %s", directory, exc)
        return []


def _discover_products(directory: Path, subdir: str) -> list[Product]:
    """Find ``<subdir>/<name>.rs`` and ``<subdir>/<name>/main.rs`` products."""
    found: list[Product] = []
    for entry in _sorted_listing(directory / subdir):
        if entry.is_file() and entry.name.endswith(".rs"):
            found.append(Product(name=entry.name[: -len(".rs")], path=f"{subdir}/{entry.name}"))
        elif entry.is_dir() and (Path(entry.path) / "main.rs").is_file():
            found.append(Product(name=entry.name, path=f"{subdir}/{entry.name}/main.rs"))
    return found


def _default_bin_path(directory: Path, name: str, package_name: str | None) -> str:
    if name and name == package_name:
        return "src/main.rs"
    if (directory / "src" / "bin" / name / "main.rs").is_file():
        return f"src/bin/{name}/main.rs"
    return f"src/bin/{name}.rs"


def _default_example_path(directory: Path, name: str) -> str:
    if (directory / "examples" / name / "main.rs").is_file():
        return f"examples/{name}/main.rs"
    return f"examples/{name}.rs"


def _merge_discovered(declared: list[Product], discovered: list[Product]) -> list[Product]:
    names = {product.name for product in declared}
    paths = {os.path.normpath(product.path) for product in declared}
    merged = list(declared)
    for product in discovered:
        if product.name in names or os.path.normpath(product.path) in paths:
            continue
        merged.append(product)
    return merged


def load_manifest(directory: Path) -> Manifest:
    """Parse ``directory/Cargo.toml`` and complete its product list.

    Declared ``[[bin]]``/``[[example]]`` entries get default paths when they
    omit one. Products cargo would auto-discover are appended unless
    ``autobins``/``autoexamples`` is false or a declared product already
    covers the same name or path.
    """
    manifest_path = directory / MANIFEST_FILENAME
    logger.info("Getting complete manifest from path: %s", directory)
    data = _read_toml(manifest_path)

    manifest = Manifest(directory=directory)
    if "package" in data:
        package = _inherit_package_fields(_table(data, "package", manifest_path), directory, manifest_path)
        package_name = package.get("name")
        if package_name is not None and not isinstance(package_name, str):
            raise ManifestInvalid(manifest_path, "package.name must be a string")
        manifest.package = package
        manifest.package_name = package_name

    manifest.bins = [
        Product(name=name, path=path or _default_bin_path(directory, name, manifest.package_name))
        for name, path in _declared_products(data, "bin", manifest_path)
    ]
    manifest.examples = [
        Product(name=name, path=path or _default_example_path(directory, name))
        for name, path in _declared_products(data, "example", manifest_path)
    ]

    if manifest.package:
        if manifest.package.get("autobins", True) is not False:
            discovered: list[Product] = []
            if manifest.package_name and (directory / "src" / "main.rs").is_file():
                discovered.append(Product(name=manifest.package_name, path="src/main.rs"))
            discovered.extend(_discover_products(directory, "src/bin"))
            manifest.bins = _merge_discovered(manifest.bins, discovered)
        if manifest.package.get("autoexamples", True) is not False:
            manifest.examples = _merge_discovered(manifest.examples, _discover_products(directory, "examples"))

    if "workspace" in data:
        workspace = _table(data, "workspace", manifest_path)
        manifest.members = _string_list(workspace, "members", manifest_path, "workspace")
        manifest.exclude = _string_list(workspace, "exclude", manifest_path, "workspace")
    return manifest


def targets_from_manifest(manifest: Manifest) -> list[Target]:
    """Return the manifest's own binaries then examples, without members."""
    targets: list[Target] = []
    for product in manifest.bins:
        target = Binary(name=product.name, source_path=manifest.directory / product.path, workspace_root=manifest.directory)
        logger.debug("Adding target: %s", target)
        targets.append(target)
    for product in manifest.examples:
        target = Example(name=product.name, source_path=manifest.directory / product.path, workspace_root=manifest.directory)
        logger.debug("Adding target: %s", target)
        targets.append(target)
    return targets


def _same_dir(a: Path, b: Path) -> bool:
    return a.resolve() == b.resolve()


def member_roots(manifest: Manifest) -> list[Path]:
    """Expand workspace members into manifest directories, in declaration order.

    Members resolving to the manifest's own directory (``"."``, ``"/."``) are
    skipped, for wildcard-expanded members too. Excluded members are dropped.
    A wildcard prefix that cannot be listed is logged and skipped.
    """
    root = manifest.directory
    excluded = {(root / entry).resolve() for entry in manifest.exclude}
    roots: list[Path] = []

    def add(candidate: Path) -> None:
        if _same_dir(candidate, root):
            logger.debug("Skipping self-referencing workspace member: %s", candidate)
            return
        if candidate.resolve() in excluded:
            logger.debug("Skipping excluded workspace member: %s", candidate)
            return
        roots.append(candidate)

    for member in manifest.members:
        logger.debug("Handling workspace member: %s", member)
        # Members are always relative to the manifest directory.
        relative = member.lstrip("/") or "."
        if relative == "*" or relative.endswith(WILDCARD_SUFFIX):
            prefix = root / relative[: -len("*")]
            try:
                with os.scandir(prefix) as it:
                    entries = sorted(it, key=lambda entry: entry.name)
            except OSError as exc:
                logger.warning("Skipping workspace member %r: cannot list %s: %s", member, prefix, exc)
                continue
            for entry in entries:
                if entry.is_dir():
                    add(prefix / entry.name)
        else:
            add(root / relative)
    return roots


def resolve_targets(root: Path) -> list[Target]:
    """Resolve ``root`` and all nested workspace members into targets.

    Order is depth-first: a manifest's own targets, then each member's
    targets in declaration order. A missing or invalid manifest anywhere
    raises. A directory reached twice (two members naming it, or a cycle
    through relative paths) is resolved only the first time.
    """
    targets: list[Target] = []
    visited: set[Path] = set()
    pending: list[Path] = [root]
    while pending:
        directory = pending.pop()
        key = directory.resolve()
        if key in visited:
            logger.warning("Skipping already resolved workspace member: %s", directory)
            continue
        visited.add(key)
        manifest = load_manifest(directory)
        targets.extend(targets_from_manifest(manifest))
        pending.extend(reversed(member_roots(manifest)))
    return targets


def find_manifest_dir(path: Path) -> Path | None:
    """Return the nearest directory at or above ``path`` holding a manifest."""
    start = path if path.is_dir() else path.parent
    for candidate in (start, *start.resolve().parents):
        if (candidate / MANIFEST_FILENAME).is_file():
            return candidate
    return None
