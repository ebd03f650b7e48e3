#!/usr/bin/env python3
from __future__ import annotations

import argparse
import ast
from dataclasses import dataclass
from pathlib import Path

DOMAIN_BANNED_EXTERNAL = {
    "sqlalchemy",
    "fastapi",
    "starlette",
    "httpx",
    "pydantic",
    "pydantic_settings",
}

APP_BANNED_EXTERNAL = {
    "sqlalchemy",
    "fastapi",
    "starlette",
    "httpx",
    "pydantic",
    "pydantic_settings",
}

API_BANNED_EXTERNAL = {
    "sqlalchemy",
    "httpx",
}

CLIENT_BANNED_EXTERNAL = {
    "sqlalchemy",
    "fastapi",
    "starlette",
}

LAYER_NAMES = ("api", "client", "application", "domain", "infrastructure")

# Allowed internal dependencies per layer; anything else inside LAYER_NAMES is a violation.
ALLOWED_INTERNAL = {
    "api": {"api", "application", "domain"},
    "client": {"client", "domain"},
    "application": {"application", "infrastructure", "domain"},
    "infrastructure": {"infrastructure", "domain"},
    "domain": {"domain"},
}

BANNED_EXTERNAL = {
    "api": API_BANNED_EXTERNAL,
    "client": CLIENT_BANNED_EXTERNAL,
    "application": APP_BANNED_EXTERNAL,
    "domain": DOMAIN_BANNED_EXTERNAL,
}

NO_INTERFACE_IMPORT_RULES = {
    ("typing", "Protocol"),
    ("typing_extensions", "Protocol"),
    ("abc", "ABC"),
    ("abc", "ABCMeta"),
    ("abc", "abstractmethod"),
}
NO_INTERFACE_BASES = {"Protocol", "ABC", "ABCMeta"}


@dataclass(frozen=True)
class ImportRef:
    module: str
    lineno: int


def _classify_layer(py_file: Path, *, pkg_root: Path) -> str | None:
    rel = py_file.relative_to(pkg_root)
    if not rel.parts:
        return None
    top = rel.parts[0]
    return top if top in LAYER_NAMES else None


def _normalize_module(module: str, package: str | None) -> str:
    if package and module.startswith(package + "."):
        return module[len(package) + 1 :]
    return module


def _extract_imports(py_path: Path) -> list[ImportRef]:
    tree = ast.parse(py_path.read_text(encoding="utf-8"), filename=str(py_path))
    found: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                found.append(ImportRef(module=alias.name, lineno=node.lineno))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                found.append(ImportRef(module=node.module, lineno=node.lineno))
    return found


def _extract_no_interface_violations(py_path: Path) -> list[str]:
    tree = ast.parse(py_path.read_text(encoding="utf-8"), filename=str(py_path))
    violations: list[str] = []
    banned_base_aliases = set(NO_INTERFACE_BASES)

    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module:
            for alias in node.names:
                if (node.module, alias.name) in NO_INTERFACE_IMPORT_RULES:
                    local_name = alias.asname or alias.name
                    violations.append(
                        f"{py_path}:{node.lineno} no-interfaces rule: forbidden import "
                        f"'{node.module}.{alias.name}'"
                    )
                    if alias.name in NO_INTERFACE_BASES:
                        banned_base_aliases.add(local_name)

    for node in ast.walk(tree):
        if not isinstance(node, ast.ClassDef):
            continue

        for base in node.bases:
            symbol = _base_symbol(base)
            if symbol is None:
                continue
            if symbol in banned_base_aliases or symbol in NO_INTERFACE_BASES:
                violations.append(
                    f"{py_path}:{node.lineno} no-interfaces rule: class '{node.name}' "
                    f"must not inherit from '{symbol}'"
                )

    return violations


def _base_symbol(node: ast.AST) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Subscript):
        return _base_symbol(node.value)
    return None


def _resolve_package_root(repo_root: Path, package: str) -> Path:
    for candidate in (repo_root / "src" / package, repo_root / package):
        if candidate.exists():
            return candidate
    raise SystemExit(f"Package root not found for package '{package}' under {repo_root}")


def collect_violations(pkg_root: Path, *, package: str) -> list[str]:
    violations: list[str] = []
    py_files = sorted(p for p in pkg_root.rglob("*.py") if p.is_file())
    for py_file in py_files:
        violations.extend(_extract_no_interface_violations(py_file))

        layer = _classify_layer(py_file, pkg_root=pkg_root)
        if layer is None:
            continue

        for imp in _extract_imports(py_file):
            normalized = _normalize_module(imp.module, package)
            top = normalized.split(".", 1)[0]

            if top in BANNED_EXTERNAL.get(layer, set()):
                violations.append(f"{py_file}:{imp.lineno} {layer} imports banned external module: {imp.module}")
            if top in LAYER_NAMES and top not in ALLOWED_INTERNAL[layer]:
                violations.append(f"{py_file}:{imp.lineno} {layer} must not depend on {top}: {imp.module}")

    return violations


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Check layering/import boundaries for API/Client -> Application -> Infrastructure -> Domain."
    )
    parser.add_argument("--root", default=".", help="Repository root (default: current directory).")
    parser.add_argument("--package", default="app", help="Python package name (default: app).")
    args = parser.parse_args(argv)

    repo_root = Path(args.root).resolve()
    pkg_root = _resolve_package_root(repo_root, args.package)

    violations = collect_violations(pkg_root, package=args.package)
    if violations:
        print("Boundary violations found:\n")
        for v in violations:
            print("-", v)
        return 1

    print(f"No boundary violations under {pkg_root} (package={args.package})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
