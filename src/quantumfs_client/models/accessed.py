"""Accessed-paths model for the GetAccessed command."""

from __future__ import annotations

from dataclasses import dataclass, field

CREATED_HEADER = "------ Created Files ------"
ACCESSED_HEADER = "------ Accessed Files ------"


@dataclass
class PathsAccessed:
    """Files touched in a workspace, keyed by path.

    A value of ``True`` means the file was created, ``False`` that it was
    only accessed.
    """

    paths: dict[str, bool] = field(default_factory=dict)

    @property
    def created(self) -> list[str]:
        return sorted(path for path, created in self.paths.items() if created)

    @property
    def accessed(self) -> list[str]:
        return sorted(path for path, created in self.paths.items() if not created)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def format(self) -> str:
        """Created files, then accessed files, one path per line."""
        lines = [CREATED_HEADER, *self.created, ACCESSED_HEADER, *self.accessed]
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict:
        return {"created": self.created, "accessed": self.accessed}
