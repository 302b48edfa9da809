"""DESCRIPTION file management"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union
from contextlib import contextmanager
import re

import structlog

from .exceptions import ManifestError
from .version_utils import ANY_VERSION, parse_constraint

logger = structlog.get_logger(__name__)

MANIFEST_FILE = "DESCRIPTION"
DEFAULT_PROJECT_NAME = "rpakproject"
DEFAULT_PROJECT_VERSION = "0.0.1"

IMPORTS = "Imports"
REMOTES = "Remotes"


@dataclass(frozen=True)
class Dependency:
    """A declared dependency"""

    name: str
    constraint: str = ANY_VERSION
    section: str = IMPORTS

    def __str__(self) -> str:
        if self.constraint == ANY_VERSION:
            return self.name
        return f"{self.name} ({self.constraint})"


@dataclass(frozen=True)
class ManifestState:
    """Raw Imports and Remotes field values, None when the field is absent"""

    imports: Optional[str]
    remotes: Optional[str]
    order: Tuple[str, ...] = ()


class ManifestStore:
    """Reads and writes the project's DESCRIPTION file (DCF format)"""

    def __init__(
        self,
        project_root: Union[str, Path],
        project_name: str = DEFAULT_PROJECT_NAME,
    ):
        """
        Initialize ManifestStore

        Args:
            project_root: Project directory holding the DESCRIPTION file
            project_name: Package identifier used when creating the file
        """
        self.project_root = Path(project_root)
        self.file_path = self.project_root / MANIFEST_FILE
        self.project_name = project_name
        self._fields: Optional[Dict[str, str]] = None
        self._field_pattern = re.compile(r"^([A-Za-z0-9][A-Za-z0-9@/._-]*):(.*)$")
        self._entry_pattern = re.compile(
            r"^([A-Za-z][A-Za-z0-9.]*)\s*(?:\(\s*([^)]*?)\s*\))?$"
        )

    @property
    def fields(self) -> Dict[str, str]:
        """Cached DESCRIPTION fields, in file order"""
        if self._fields is None:
            self._read()
        return self._fields

    def _read(self) -> None:
        """Read and parse the DESCRIPTION file"""
        if not self.file_path.exists():
            raise ManifestError(f"File not found: {self.file_path}")

        with self.file_path.open("r", encoding="utf-8") as f:
            self._fields = self._parse(f.read())

    def _parse(self, content: str) -> Dict[str, str]:
        fields: Dict[str, str] = {}
        current = None
        for lineno, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue
            if line[0] in " \t":
                if current is None:
                    raise ManifestError(
                        f"Invalid {MANIFEST_FILE}",
                        details=f"line {lineno}: continuation without a field",
                    )
                fields[current] += "\n" + line.rstrip()
                continue
            match = self._field_pattern.match(line)
            if not match:
                raise ManifestError(
                    f"Invalid {MANIFEST_FILE}",
                    details=f"line {lineno}: {line.strip()}",
                )
            current, value = match.group(1), match.group(2)
            fields[current] = value.strip()
        return fields

    def _write(self) -> None:
        """Write current fields back to DESCRIPTION"""
        lines = []
        for key, value in self.fields.items():
            if value.startswith("\n"):
                lines.append(f"{key}:{value}")
            else:
                lines.append(f"{key}: {value}")
        with self.file_path.open("w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    @contextmanager
    def bulk_operation(self):
        """Context manager for bulk operations"""
        try:
            yield self
        finally:
            self._write()

    def ensure_exists(self) -> bool:
        """
        Create a minimal DESCRIPTION if none exists

        Returns:
            bool: True if the file was created
        """
        if self.file_path.exists():
            return False

        self._fields = {
            "Package": self.project_name,
            "Version": DEFAULT_PROJECT_VERSION,
        }
        self._write()
        logger.info("manifest_created", path=str(self.file_path))
        return True

    def get_project_name(self) -> Optional[str]:
        return self.fields.get("Package")

    # Comma separated list fields

    def _get_entries(self, field: str) -> List[str]:
        value = self.fields.get(field, "")
        return [
            entry.strip()
            for entry in value.replace("\n", " ").split(",")
            if entry.strip()
        ]

    def _set_entries(self, field: str, entries: List[str]) -> None:
        if entries:
            self.fields[field] = "".join(
                f"\n    {entry}," for entry in entries
            ).rstrip(",")
        else:
            self.fields.pop(field, None)

    def _parse_entry(self, entry: str) -> Tuple[str, str]:
        """
        Parse a dependency entry into components

        Args:
            entry: Entry string (e.g., 'dplyr (>= 1.0.0)')

        Returns:
            Tuple[str, str]: Package name, constraint

        Raises:
            ValueError: If entry format is invalid
        """
        match = self._entry_pattern.match(entry)
        if not match:
            raise ValueError(f"Invalid dependency format: {entry}")

        name, constraint = match.groups()
        if not constraint:
            return name, ANY_VERSION
        operator, version = parse_constraint(constraint)
        return name, f"{operator} {version}"

    # Dependencies

    def get_dependencies(self, section: str = IMPORTS) -> Dict[str, Dependency]:
        """
        Get declared dependencies of a section

        Returns:
            Dict[str, Dependency]: Dependencies keyed by package name
        """
        result = {}
        for entry in self._get_entries(section):
            try:
                name, constraint = self._parse_entry(entry)
            except ValueError:
                continue
            result[name] = Dependency(name, constraint, section)
        return result

    def get_dependency(self, name: str) -> Optional[Dependency]:
        return self.get_dependencies().get(name)

    def has_dependency(self, name: str) -> bool:
        return name in self.get_dependencies()

    def set_dependency(self, name: str, constraint: str = ANY_VERSION) -> None:
        """
        Add or update a dependency in Imports

        Args:
            name: Name of the package
            constraint: '*' for any version, or e.g. '== 1.0.0'

        Raises:
            ValueError: If the constraint is invalid
        """
        operator, version = parse_constraint(constraint)
        dependency = Dependency(
            name, f"{operator} {version}" if operator else ANY_VERSION
        )

        new_entries = []
        found = False
        for entry in self._get_entries(IMPORTS):
            try:
                current_name, _ = self._parse_entry(entry)
            except ValueError:
                new_entries.append(entry)
                continue
            if current_name == name:
                if not found:
                    new_entries.append(str(dependency))
                found = True
            else:
                new_entries.append(entry)

        if not found:
            new_entries.append(str(dependency))

        self._set_entries(IMPORTS, new_entries)
        self._write()
        logger.debug("dependency_set", name=name, constraint=dependency.constraint)

    def remove_dependency(self, name: str) -> bool:
        """
        Remove a dependency from Imports

        Returns:
            bool: True if a record was removed
        """
        entries = self._get_entries(IMPORTS)
        new_entries = []
        for entry in entries:
            try:
                current_name, _ = self._parse_entry(entry)
            except ValueError:
                new_entries.append(entry)
                continue
            if current_name != name:
                new_entries.append(entry)

        removed = len(new_entries) != len(entries)
        if removed:
            self._set_entries(IMPORTS, new_entries)
            self._write()
            logger.debug("dependency_removed", name=name)
        return removed

    # Remotes

    def get_remotes(self) -> List[str]:
        return self._get_entries(REMOTES)

    def add_remotes(self, remotes: Iterable[str]) -> None:
        """Append remote locators not already listed"""
        current = self.get_remotes()
        added = [r for r in dict.fromkeys(remotes) if r and r not in current]
        if not added:
            return
        self._set_entries(REMOTES, current + added)
        self._write()
        logger.debug("remotes_added", remotes=added)

    def remove_remotes(self, remotes: Iterable[str]) -> None:
        """Remove remote locators; unknown locators are ignored"""
        to_remove = set(remotes)
        current = self.get_remotes()
        kept = [r for r in current if r not in to_remove]
        if len(kept) == len(current):
            return
        self._set_entries(REMOTES, kept)
        self._write()
        logger.debug("remotes_removed", remotes=sorted(to_remove))

    # Rollback support

    def snapshot_state(self) -> ManifestState:
        """Capture the dependency and remotes state"""
        return ManifestState(
            imports=self.fields.get(IMPORTS),
            remotes=self.fields.get(REMOTES),
            order=tuple(self.fields),
        )

    def restore_state(self, state: ManifestState) -> None:
        """Restore a state captured by snapshot_state, field order included"""
        with self.bulk_operation():
            fields = self.fields
            for field, value in ((IMPORTS, state.imports), (REMOTES, state.remotes)):
                if value is None:
                    fields.pop(field, None)
                else:
                    fields[field] = value
            ordered = {key: fields[key] for key in state.order if key in fields}
            ordered.update(fields)
            self._fields = ordered
        logger.info("manifest_restored", path=str(self.file_path))
