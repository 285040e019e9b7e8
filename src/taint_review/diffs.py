"""
Unified diff handling.

Splits ``git diff`` (or plain ``diff -u``) output into per-file records,
computes change statistics, and builds the concatenated text blob that
the secret scanner runs over.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, List, Optional

HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

EXT_LANG = {
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".html": "HTML",
    ".htm": "HTML",
    ".py": "Python",
    ".go": "Go",
    ".rb": "Ruby",
    ".java": "Java",
    ".cs": "C#",
    ".php": "PHP",
    ".rs": "Rust",
    ".sql": "SQL",
    ".yml": "YAML",
    ".yaml": "YAML",
    ".json": "JSON",
}

DEV_NULL = "/dev/null"


@dataclass(frozen=True)
class DiffFile:
    """One file's portion of a unified diff."""
    filename: str
    status: str  # 'added', 'removed', 'modified', 'renamed'
    additions: int
    deletions: int
    patch: str
    previous_filename: Optional[str] = None
    binary: bool = False


@dataclass(frozen=True)
class DiffStats:
    files_changed: int
    additions: int
    deletions: int


@dataclass(frozen=True)
class UnifiedDiff:
    text: str
    stats: DiffStats
    languages: List[str]


def _strip_prefix(path: str) -> str:
    path = path.split("\t", 1)[0].strip()
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


@dataclass
class _FileBuilder:
    filename: str = ""
    previous_filename: Optional[str] = None
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    binary: bool = False
    patch: List[str] = field(default_factory=list)
    old_remaining: int = 0
    new_remaining: int = 0

    @classmethod
    def from_git_header(cls, line: str) -> "_FileBuilder":
        # diff --git a/<old> b/<new>
        rest = line[len("diff --git "):]
        split = rest.rfind(" b/")
        if split >= 0:
            return cls(filename=rest[split + 3:], previous_filename=_strip_prefix(rest[:split]))
        return cls(filename=_strip_prefix(rest))

    def in_hunk(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def feed(self, line: str) -> None:
        if self.in_hunk():
            self.patch.append(line)
            if line.startswith("+"):
                self.additions += 1
                self.new_remaining -= 1
            elif line.startswith("-"):
                self.deletions += 1
                self.old_remaining -= 1
            elif not line.startswith("\\"):
                self.old_remaining -= 1
                self.new_remaining -= 1
            return

        match = HUNK_HEADER.match(line)
        if match:
            self.patch.append(line)
            self.old_remaining = int(match.group(2)) if match.group(2) is not None else 1
            self.new_remaining = int(match.group(4)) if match.group(4) is not None else 1
            return

        if line.startswith("\\"):
            self.patch.append(line)
        elif line.startswith("new file mode"):
            self.status = "added"
        elif line.startswith("deleted file mode"):
            self.status = "removed"
        elif line.startswith("rename from "):
            self.status = "renamed"
            self.previous_filename = line[len("rename from "):]
        elif line.startswith("rename to "):
            self.filename = line[len("rename to "):]
        elif line.startswith("Binary files"):
            self.binary = True
        elif line.startswith("--- "):
            old = _strip_prefix(line[4:])
            if old == DEV_NULL:
                self.status = "added"
            else:
                self.previous_filename = old
        elif line.startswith("+++ "):
            new = _strip_prefix(line[4:])
            if new == DEV_NULL:
                self.status = "removed"
            else:
                self.filename = new

    def build(self) -> DiffFile:
        filename = self.filename
        if self.status == "removed" and self.previous_filename:
            filename = self.previous_filename
        previous = self.previous_filename if self.status == "renamed" else None
        return DiffFile(
            filename=filename,
            status=self.status,
            additions=self.additions,
            deletions=self.deletions,
            patch="\n".join(self.patch),
            previous_filename=previous,
            binary=self.binary,
        )


def parse_unified_diff(text: str) -> List[DiffFile]:
    """
    Split unified diff text into ``DiffFile`` records.

    Hunk line counts are tracked so that removed lines starting with
    ``---`` are not mistaken for file headers.
    """
    files: List[DiffFile] = []
    builder: Optional[_FileBuilder] = None

    for line in text.splitlines():
        if builder is None or not builder.in_hunk():
            if line.startswith("diff --git "):
                if builder is not None:
                    files.append(builder.build())
                builder = _FileBuilder.from_git_header(line)
                continue
            if line.startswith("--- ") and (builder is None or builder.patch):
                # plain diff -u output has no "diff --git" line
                if builder is not None:
                    files.append(builder.build())
                builder = _FileBuilder()
        if builder is not None:
            builder.feed(line)

    if builder is not None:
        files.append(builder.build())
    return files


def added_line_numbers(patch: str) -> List[int]:
    """Post-change line numbers of the lines a patch adds."""
    lines: List[int] = []
    current = 0
    for line in patch.splitlines():
        match = HUNK_HEADER.match(line)
        if match:
            current = int(match.group(3))
        elif line.startswith("+"):
            lines.append(current)
            current += 1
        elif line.startswith(("-", "\\")):
            continue
        elif current:
            current += 1
    return lines


def detect_languages(filenames: Iterable[str]) -> List[str]:
    languages: List[str] = []
    for name in filenames:
        language = EXT_LANG.get(PurePosixPath(name).suffix.lower())
        if language and language not in languages:
            languages.append(language)
    return languages


def build_unified(files: List[DiffFile]) -> UnifiedDiff:
    """
    Concatenate per-file patches under ``# File:`` headers.

    The result's text is what secret scanning runs over.
    """
    parts = [f"\n# File: {f.filename}\n{f.patch}\n" for f in files if f.patch]
    stats = DiffStats(
        files_changed=len(files),
        additions=sum(f.additions for f in files),
        deletions=sum(f.deletions for f in files),
    )
    return UnifiedDiff("".join(parts), stats, detect_languages(f.filename for f in files))
