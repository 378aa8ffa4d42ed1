"""Mock file repository for testing."""

from pathlib import Path
from typing import Dict, List, Union


class MockFileRepository:
    """Mock implementation of FileRepositoryProtocol for testing.

    Allows tests to simulate file operations without touching the filesystem.
    Paths are stored as strings exactly as given, so tests should use one
    style (relative or absolute) consistently.
    """

    def __init__(self) -> None:
        """Initialize mock repository with empty filesystem."""
        self.files: Dict[str, bytes] = {}
        self.directories: set = set()

    @staticmethod
    def _is_under(path: str, directory: str) -> bool:
        return path == directory or path.startswith(directory.rstrip("/") + "/")

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if a file or directory exists."""
        path_str = str(path)
        return path_str in self.files or path_str in self.directories

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        return str(path) in self.files

    def is_dir(self, path: Union[str, Path]) -> bool:
        """Check if path is a directory."""
        return str(path) in self.directories

    def read_binary(self, path: Union[str, Path]) -> bytes:
        """Read file contents as bytes."""
        path_str = str(path)
        if path_str not in self.files:
            raise FileNotFoundError(f"File not found: {path}")
        return self.files[path_str]

    def read_text(self, path: Union[str, Path], encoding: str = "utf-8") -> str:
        """Read file contents as text."""
        return self.read_binary(path).decode(encoding)

    def write_binary(self, path: Union[str, Path], data: bytes) -> None:
        """Write bytes to file."""
        self.mkdir(Path(path).parent, parents=True)
        self.files[str(path)] = data

    def write_text(self, path: Union[str, Path], content: str, encoding: str = "utf-8") -> None:
        """Write text to file."""
        self.write_binary(path, content.encode(encoding))

    def list_files(
        self,
        directory: Union[str, Path],
        pattern: str = "*",
        recursive: bool = False,
    ) -> List[Path]:
        """List files in directory matching pattern, sorted by path."""
        dir_str = str(directory)
        results = []

        for file_path in self.files:
            file_path_obj = Path(file_path)
            if not file_path_obj.match(pattern):
                continue
            if str(file_path_obj.parent) == dir_str or (
                recursive and self._is_under(file_path, dir_str)
            ):
                results.append(file_path_obj)

        return sorted(results)

    def list_dirs(self, directory: Union[str, Path]) -> List[Path]:
        """List immediate subdirectories, sorted by name."""
        dir_str = str(directory)
        return sorted(
            Path(d) for d in self.directories if d != dir_str and str(Path(d).parent) == dir_str
        )

    def mkdir(self, path: Union[str, Path], parents: bool = True) -> None:
        """Create directory (and parents if needed)."""
        path_str = str(path)
        self.directories.add(path_str)
        if parents:
            parent = str(Path(path).parent)
            if parent != path_str and parent not in self.directories:
                self.mkdir(parent, parents=True)

    def delete_dir(self, path: Union[str, Path], recursive: bool = False) -> None:
        """Delete a directory."""
        path_str = str(path)
        if path_str not in self.directories:
            raise FileNotFoundError(f"Directory not found: {path}")

        contents = [k for k in self.files if self._is_under(k, path_str)]
        subdirs = [d for d in self.directories if d != path_str and self._is_under(d, path_str)]
        if (contents or subdirs) and not recursive:
            raise OSError(f"Directory not empty: {path}")

        for k in contents:
            del self.files[k]
        for d in subdirs:
            self.directories.discard(d)
        self.directories.discard(path_str)

    def rename(self, source: Union[str, Path], destination: Union[str, Path]) -> None:
        """Rename a file or directory; destination must not exist."""
        src, dst = str(source), str(destination)
        if not self.exists(src):
            raise FileNotFoundError(f"Not found: {source}")
        if self.exists(dst):
            raise FileExistsError(f"Already exists: {destination}")

        if src in self.files:
            self.files[dst] = self.files.pop(src)
            return

        for k in [k for k in self.files if self._is_under(k, src)]:
            self.files[dst + k[len(src):]] = self.files.pop(k)
        for d in [d for d in self.directories if self._is_under(d, src)]:
            self.directories.discard(d)
            self.directories.add(dst + d[len(src):])

    def get_size(self, path: Union[str, Path]) -> int:
        """Get file size in bytes."""
        return len(self.read_binary(path))

    def get_extension(self, path: Union[str, Path]) -> str:
        """Get file extension."""
        return Path(path).suffix.lstrip(".")
