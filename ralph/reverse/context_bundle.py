"""
Context Bundle Collector
========================
Scans a repository for context and writes a single markdown bundle that the
generation backend reads alongside the ticket.

The bundle contains:
- the ticket (byte-capped)
- excerpts of matched documentation and configuration files
- path and metadata entries for matched images
- optionally, excerpts of matched source files

Matching uses shell-style globs relative to the context directory (`**`
spans directories, hidden files only match patterns that start with a dot).
Paths under built-in excluded directories, or matching a prefix rule from
`.ralphignore`, are skipped. Each category has a file-count cap; each
excerpt has a byte cap and is truncated with a visible marker.

The bundle is rebuilt on every run.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import glob
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from ralph.config import CONTEXT_LIMITS, OUTPUTS
from ralph.utils.atomic_write import write_text_atomic


EXCLUDE_DIRS = frozenset(
    {
        ".git",
        "node_modules",
        "vendor",
        "dist",
        "build",
        "target",
        ".next",
        ".turbo",
        ".cache",
        "coverage",
        ".idea",
        ".vscode",
        ".pytest_cache",
        ".mypy_cache",
        ".venv",
        "venv",
        "__pycache__",
    }
)

DOC_GLOBS = (
    "README*",
    "docs/**/*.md", "docs/**/*.mdx", "docs/**/*.adoc", "docs/**/*.rst", "docs/**/*.txt",
    "design/**/*.md", "design/**/*.mdx", "design/**/*.adoc", "design/**/*.rst", "design/**/*.txt",
    "adr/**/*.md", "adrs/**/*.md", "docs/adrs/**/*.md",
    "*.md", "*.mdx", "*.adoc", "*.rst", "*.txt",
    "CHANGELOG*", "CONTRIBUTING*",
    "package.json", "tsconfig*.json", "pnpm-workspace.yaml", "lerna.json", "turbo.json",
    "Cargo.toml", "go.mod", "go.work", "pyproject.toml", "requirements*.txt",
    "*.yaml", "*.yml", "*.json", "*.toml", "*.ini", "*.env", ".env*",
)

CODE_GLOBS = (
    "src/**/*", "packages/**/*", "plugins/**/*",
    "*.ts", "*.tsx", "*.js", "*.jsx", "*.go", "*.py", "*.java", "*.kt", "*.rs",
    "*.c", "*.h", "*.cpp", "*.hpp", "*.sh",
)

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "webp", "gif", "svg"})

IMAGE_GLOBS = tuple(
    f"{prefix}*.{ext}"
    for prefix in ("", "docs/**/", "design/**/", "assets/**/")
    for ext in sorted(IMAGE_EXTENSIONS)
)

# Bytes inspected when deciding whether a file is text
_SNIFF_BYTES = 8192


@dataclass(frozen=True)
class ContextLimits:
    """Per-category caps applied while building the bundle."""

    max_text_bytes: int = CONTEXT_LIMITS.MAX_TEXT_BYTES
    max_code_bytes: int = CONTEXT_LIMITS.MAX_CODE_BYTES
    max_ticket_bytes: int = CONTEXT_LIMITS.MAX_TICKET_BYTES
    max_files_docs: int = CONTEXT_LIMITS.MAX_FILES_DOCS
    max_files_code: int = CONTEXT_LIMITS.MAX_FILES_CODE
    max_files_images: int = CONTEXT_LIMITS.MAX_FILES_IMAGES


@dataclass
class BundleSummary:
    """What went into a bundle, as paths relative to the context directory."""

    path: Path
    doc_files: List[str] = field(default_factory=list)
    image_files: List[str] = field(default_factory=list)
    code_files: List[str] = field(default_factory=list)
    include_code: bool = True
    ignore_file: Optional[Path] = None


class IgnoreRules:
    """Excluded directory names plus `.ralphignore` path-prefix rules."""

    def __init__(self, prefixes: Iterable[str] = (), exclude_dirs: Iterable[str] = EXCLUDE_DIRS):
        self.prefixes = [p for p in prefixes if p]
        self.exclude_dirs = frozenset(exclude_dirs)
        self.source: Optional[Path] = None

    @classmethod
    def load(cls, context_dir: Path, filename: str = OUTPUTS.IGNORE_FILENAME) -> "IgnoreRules":
        """Read prefix rules from context_dir/filename; blank and '#' lines are ignored."""
        ignore_file = context_dir / filename
        prefixes: List[str] = []
        if ignore_file.is_file():
            for raw_line in ignore_file.read_text(encoding="utf-8", errors="replace").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                prefixes.append(line)

        rules = cls(prefixes)
        if ignore_file.is_file():
            rules.source = ignore_file
        return rules

    def is_excluded(self, rel: str) -> bool:
        rel = Path(rel).as_posix()
        parts = rel.split("/")
        if any(part in self.exclude_dirs for part in parts):
            return True
        return any(rel.startswith(prefix) for prefix in self.prefixes)


def collect_matches(
    context_dir: Path,
    patterns: Sequence[str],
    cap: int,
    rules: IgnoreRules,
) -> List[str]:
    """Return up to cap unique files matching patterns, in pattern order.

    Matches of each pattern are sorted; directories and excluded paths are
    skipped before they count against the cap.
    """
    results: List[str] = []
    seen: set[str] = set()
    if cap <= 0:
        return results

    for pattern in patterns:
        for rel in sorted(glob.glob(pattern, root_dir=str(context_dir), recursive=True)):
            rel = Path(rel).as_posix()
            if rel in seen:
                continue
            if not (context_dir / rel).is_file():
                continue
            if rules.is_excluded(rel):
                logger.debug("Excluded from context: {}", rel)
                continue
            seen.add(rel)
            results.append(rel)
            if len(results) >= cap:
                return results
    return results


def file_bytes(path: Path) -> int:
    return path.stat().st_size


def is_text_like(path: Path) -> bool:
    """Non-empty and no NUL byte in the first block."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(_SNIFF_BYTES)
    except OSError as e:
        logger.warning("Could not read {}: {}", path, e)
        return False
    return bool(chunk) and b"\x00" not in chunk


def is_image_like(path: Path) -> bool:
    return path.suffix.lower().lstrip(".") in IMAGE_EXTENSIONS


def guess_mime(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name)
    return mime or "unknown"


def safe_excerpt(path: Path, max_bytes: int) -> str:
    """Return the file's text, cut at max_bytes with a truncation marker."""
    with open(path, "rb") as f:
        data = f.read(max_bytes + 1)

    if len(data) <= max_bytes:
        return data.decode("utf-8", errors="replace")

    text = data[:max_bytes].decode("utf-8", errors="replace")
    return f"{text}\n\n[...truncated to {max_bytes} bytes...]"


def _fenced(text: str) -> List[str]:
    return ["```", text.rstrip("\n"), "```", ""]


def _excerpt_section(context_dir: Path, rel_files: Sequence[str], max_bytes: int) -> List[str]:
    lines: List[str] = []
    for rel in rel_files:
        f = context_dir / rel
        lines += [f"### {f}", f"- bytes: {file_bytes(f)}", ""]
        lines += _fenced(safe_excerpt(f, max_bytes))
    return lines


def build_context_bundle(
    context_dir: Path,
    ticket_path: Path,
    *,
    include_code: bool = True,
    limits: Optional[ContextLimits] = None,
    rules: Optional[IgnoreRules] = None,
) -> tuple[str, BundleSummary]:
    """Build the bundle text without writing it."""
    limits = limits or ContextLimits()
    rules = rules or IgnoreRules.load(context_dir)
    summary = BundleSummary(path=Path(), include_code=include_code, ignore_file=rules.source)

    lines: List[str] = [
        "# Context Bundle (Reverse Ralph)",
        "",
        f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')}",
        f"Repo/context dir: {context_dir}",
    ]
    if rules.source is not None:
        lines.append(f"Using ignore file: {rules.source}")
    lines += ["", "## Ticket", ""]
    lines += _fenced(safe_excerpt(ticket_path, limits.max_ticket_bytes))

    # Docs and config
    summary.doc_files = [
        rel
        for rel in collect_matches(context_dir, DOC_GLOBS, limits.max_files_docs, rules)
        if is_text_like(context_dir / rel)
    ]
    lines += ["## Docs & Config Context (excerpts)", ""]
    if not summary.doc_files:
        lines += ["_No doc/config files matched._", ""]
    lines += _excerpt_section(context_dir, summary.doc_files, limits.max_text_bytes)

    # Images
    summary.image_files = [
        rel
        for rel in collect_matches(context_dir, IMAGE_GLOBS, limits.max_files_images, rules)
        if is_image_like(context_dir / rel)
    ]
    lines += ["## Images (paths + metadata)", ""]
    if not summary.image_files:
        lines += ["_No images matched._", ""]
    else:
        lines += [
            "If you see lines like 'Analyze this image: <path>', you should open and interpret the image as context.",
            "",
        ]
    for rel in summary.image_files:
        f = context_dir / rel
        lines += [
            f"### {f}",
            f"- mime: {guess_mime(f)}",
            f"- bytes: {file_bytes(f)}",
            f"- Analyze this image: {f}",
            "",
        ]

    # Code
    if include_code:
        summary.code_files = [
            rel
            for rel in collect_matches(context_dir, CODE_GLOBS, limits.max_files_code, rules)
            if is_text_like(context_dir / rel)
        ]
        lines += ["## Code Context (selected excerpts)", ""]
        if not summary.code_files:
            lines += ["_No code files matched (or all excluded)._", ""]
        else:
            lines += ["Representative excerpts only. Prefer inspecting repo directly for complete context.", ""]
        lines += _excerpt_section(context_dir, summary.code_files, limits.max_code_bytes)
    else:
        lines += ["## Code Context", "", "_Code excerpts disabled (docs-only mode)._", ""]

    return "\n".join(lines), summary


def write_context_bundle(
    context_dir: Path,
    ticket_path: Path,
    dest: Path,
    *,
    include_code: bool = True,
    limits: Optional[ContextLimits] = None,
    rules: Optional[IgnoreRules] = None,
) -> BundleSummary:
    """Rebuild the bundle at dest and return what went into it."""
    text, summary = build_context_bundle(
        context_dir,
        ticket_path,
        include_code=include_code,
        limits=limits,
        rules=rules,
    )
    write_text_atomic(dest, text)
    summary.path = dest
    logger.info(
        "Context bundle written: {} docs, {} images, {} code files",
        len(summary.doc_files),
        len(summary.image_files),
        len(summary.code_files),
    )
    return summary
