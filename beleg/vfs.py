"""In-memory view of a project directory tree with per-file compilation state."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path, PurePath

from beleg.ast import Ast
from beleg.source_map import FileId

VfsNodeId = int

INVALID_VFS_NODE_ID: VfsNodeId = 2**32 - 1

_SOURCE_EXTENSIONS = frozenset({".bl", ".beleg"})


class DirKind(Enum):
    """Role of a directory within a project."""

    NORMAL = auto()
    SRC = auto()
    BUILD = auto()
    EXAMPLES = auto()
    TESTS = auto()
    DOCS = auto()


class FileKind(Enum):
    """Role of a file within a project."""

    NORMAL = auto()
    MAIN = auto()
    MOD = auto()
    PACKAGE_CONFIG = auto()
    OTHER = auto()


class VfsNodeType(Enum):
    """Whether a node is a directory or a file."""

    DIRECTORY = auto()
    FILE = auto()


@dataclass
class DirNode:
    """Directory-specific data: its kind and the ids of its children."""

    kind: DirKind
    children: list[VfsNodeId] = field(default_factory=list)


@dataclass
class FileNode:
    """File-specific data, with lazily attached source file id and syntax tree."""

    kind: FileKind
    source_file_id: FileId | None = None
    ast: Ast | None = None


@dataclass
class VfsNode:
    """A named node in the tree, holding either directory or file data."""

    name: str
    data: DirNode | FileNode
    parent: VfsNodeId | None = None

    @property
    def type(self) -> VfsNodeType:
        if isinstance(self.data, DirNode):
            return VfsNodeType.DIRECTORY
        return VfsNodeType.FILE

    @property
    def dir(self) -> DirNode:
        if not isinstance(self.data, DirNode):
            raise TypeError(f"{self.name!r} is not a directory")
        return self.data

    @property
    def file(self) -> FileNode:
        if not isinstance(self.data, FileNode):
            raise TypeError(f"{self.name!r} is not a file")
        return self.data


class VfsErrorKind(Enum):
    """Categories of errors raised while building or using a :class:`Vfs`."""

    PATH_NOT_FOUND = auto()
    INVALID_PATH = auto()
    FILE_SYSTEM_ERROR = auto()
    INVALID_NODE_TYPE = auto()
    NODE_NOT_FOUND = auto()


class VfsError(Exception):
    """An error with a category and a message."""

    def __init__(self, kind: VfsErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


def is_beleg_source_file(path: str | os.PathLike[str]) -> bool:
    """Whether the path has a source file extension."""
    return PurePath(path).suffix in _SOURCE_EXTENSIONS


def get_file_kind(
    path: str | os.PathLike[str], relative_path: str | os.PathLike[str]
) -> FileKind:
    """Classify a file from its name and its path relative to the project root."""
    filename = PurePath(path).name
    relative = PurePath(relative_path)

    if filename == "package.toml" and relative.parent == PurePath("."):
        return FileKind.PACKAGE_CONFIG
    if filename == "main.bl" and relative.parent == PurePath("src"):
        return FileKind.MAIN
    if filename == "mod.bl":
        return FileKind.MOD
    if is_beleg_source_file(path):
        return FileKind.NORMAL
    return FileKind.OTHER


_TOP_LEVEL_DIRS = {
    PurePath("."): DirKind.SRC,
    PurePath("src"): DirKind.SRC,
    PurePath("build"): DirKind.BUILD,
    PurePath("examples"): DirKind.EXAMPLES,
    PurePath("tests"): DirKind.TESTS,
    PurePath("docs"): DirKind.DOCS,
}


def get_dir_kind(
    path: str | os.PathLike[str], relative_path: str | os.PathLike[str]
) -> DirKind:
    """Classify a directory from its path relative to the project root."""
    return _TOP_LEVEL_DIRS.get(PurePath(relative_path), DirKind.NORMAL)


class Vfs:
    """Tree of directories and files rooted at a project directory."""

    def __init__(self, root_path: str | os.PathLike[str]) -> None:
        self.root_path = Path(root_path)
        self._nodes: list[VfsNode] = []
        self._path_to_node: dict[str, VfsNodeId] = {}
        self.root_node_id = self._add_node(
            VfsNode(self.root_path.name, DirNode(DirKind.SRC))
        )

    @classmethod
    def build_from_fs(cls, path: str | os.PathLike[str]) -> Vfs:
        """Scan a directory on disk into a new tree.

        Raises :class:`VfsError` if the path is missing, is not a directory,
        or cannot be read.
        """
        root = Path(path)
        if not root.exists():
            raise VfsError(
                VfsErrorKind.PATH_NOT_FOUND, f"Path does not exist: {os.fspath(path)}"
            )
        if not root.is_dir():
            raise VfsError(
                VfsErrorKind.INVALID_PATH,
                f"Path is not a directory: {os.fspath(path)}",
            )
        vfs = cls(root)
        vfs._scan_directory(root, vfs.root_node_id)
        vfs._build_path_mapping(vfs.root_node_id, PurePath(""))
        return vfs

    def _add_node(self, node: VfsNode) -> VfsNodeId:
        self._nodes.append(node)
        return len(self._nodes) - 1

    def _scan_directory(self, dir_path: Path, parent_id: VfsNodeId) -> None:
        try:
            entries = sorted(dir_path.iterdir())
        except OSError as exc:
            raise VfsError(
                VfsErrorKind.FILE_SYSTEM_ERROR,
                f"Error scanning directory {dir_path}: {exc}",
            ) from exc

        parent = self._nodes[parent_id].dir
        for entry in entries:
            relative = entry.relative_to(self.root_path)
            if entry.is_dir():
                node = VfsNode(
                    entry.name, DirNode(get_dir_kind(entry, relative)), parent_id
                )
                node_id = self._add_node(node)
                parent.children.append(node_id)
                self._scan_directory(entry, node_id)
            elif entry.is_file():
                node = VfsNode(
                    entry.name, FileNode(get_file_kind(entry, relative)), parent_id
                )
                parent.children.append(self._add_node(node))

    def _build_path_mapping(self, node_id: VfsNodeId, current: PurePath) -> None:
        node = self._nodes[node_id]
        self._path_to_node[str(current)] = node_id
        if isinstance(node.data, DirNode):
            for child_id in node.data.children:
                self._build_path_mapping(child_id, current / self._nodes[child_id].name)

    def get_node(self, node_id: VfsNodeId) -> VfsNode | None:
        """The node with this id, or None if there is none."""
        if 0 <= node_id < len(self._nodes):
            return self._nodes[node_id]
        return None

    def _components(self, node_id: VfsNodeId) -> list[str] | None:
        """Names from below the root down to the node."""
        node = self.get_node(node_id)
        if node is None:
            return None
        names: list[str] = []
        while node is not None and node.parent is not None:
            names.append(node.name)
            node = self.get_node(node.parent)
        names.reverse()
        return names

    def get_absolute_path(self, node_id: VfsNodeId) -> Path | None:
        """Path of the node on disk."""
        names = self._components(node_id)
        if names is None:
            return None
        return self.root_path.joinpath(*names)

    def get_project_path(self, node_id: VfsNodeId) -> PurePath | None:
        """Path of the node relative to the project root."""
        names = self._components(node_id)
        if names is None:
            return None
        return PurePath(*names)

    def resolve(self, path: str | Iterable[str]) -> VfsNodeId | None:
        """Find a node by a ``/``-separated path or a sequence of names."""
        if isinstance(path, str):
            components = [part for part in path.split("/") if part]
        else:
            components = list(path)

        current_id = self.root_node_id
        for component in components:
            node = self.get_node(current_id)
            if node is None or not isinstance(node.data, DirNode):
                return None
            found = next(
                (
                    child_id
                    for child_id in node.data.children
                    if self._nodes[child_id].name == component
                ),
                None,
            )
            if found is None:
                return None
            current_id = found
        return current_id

    def _file_data(self, node_id: VfsNodeId) -> FileNode | None:
        node = self.get_node(node_id)
        if node is None or not isinstance(node.data, FileNode):
            return None
        return node.data

    def get_source_file_id(self, node_id: VfsNodeId) -> FileId | None:
        file = self._file_data(node_id)
        return file.source_file_id if file is not None else None

    def set_source_file_id(self, node_id: VfsNodeId, source_file_id: FileId) -> bool:
        """Attach a source file id; False if the node is not a file."""
        file = self._file_data(node_id)
        if file is None:
            return False
        file.source_file_id = source_file_id
        return True

    def get_ast(self, node_id: VfsNodeId) -> Ast | None:
        file = self._file_data(node_id)
        return file.ast if file is not None else None

    def set_ast(self, node_id: VfsNodeId, ast: Ast) -> bool:
        """Attach a syntax tree; False if the node is not a file."""
        file = self._file_data(node_id)
        if file is None:
            return False
        file.ast = ast
        return True

    def get_entry_file(self, dir_node_id: VfsNodeId) -> VfsNodeId | None:
        """The entry file of a directory: main.bl for source roots, mod.bl for modules."""
        node = self.get_node(dir_node_id)
        if node is None or not isinstance(node.data, DirNode):
            return None
        if node.data.kind is DirKind.SRC:
            entry_name = "main.bl"
        elif node.data.kind is DirKind.NORMAL:
            entry_name = "mod.bl"
        else:
            return None
        return next(
            (
                child_id
                for child_id in node.data.children
                if isinstance(self._nodes[child_id].data, FileNode)
                and self._nodes[child_id].name == entry_name
            ),
            None,
        )

    def get_children(self, node_id: VfsNodeId) -> list[VfsNodeId] | None:
        """Ids of a directory's children; None if the node is not a directory."""
        node = self.get_node(node_id)
        if node is None or not isinstance(node.data, DirNode):
            return None
        return list(node.data.children)