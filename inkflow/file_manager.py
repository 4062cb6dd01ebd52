"""File management utilities for the InkFlow interface.

This module provides a per-session file manager that handles temporary file
creation, tracking, and cleanup for the Gradio interface: exported composites
and fetched sample photos.
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class SessionFileManager:
    """Manages temporary files for a Gradio session.

    Implements a single-active-file pattern for each file type: writing a
    new export or sample photo replaces the previous one instead of
    accumulating files. Works with Gradio's built-in cache management.

    Attributes:
        session_dir: Path to the session's temporary directory.
        current_files: Dictionary tracking current active files by type.
    """

    def __init__(self, session_id: str | None = None):
        """Initialize the file manager with an optional session ID.

        Args:
            session_id: Optional unique session identifier. If None, a
                       unique directory is created under the temp root.
        """
        # Use Gradio's temp directory if available, otherwise system temp
        base_dir = os.environ.get("GRADIO_TEMP_DIR", tempfile.gettempdir())

        if session_id:
            self.session_dir = Path(base_dir) / f"inkflow-{session_id}"
        else:
            self.session_dir = Path(tempfile.mkdtemp(prefix="inkflow-", dir=base_dir))

        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.current_files: dict[str, Path] = {}

    def write_file(self, file_type: str, content: bytes, filename: str) -> str:
        """Write content for a file type, replacing the previous file.

        Args:
            file_type: Kind of file (e.g., "export", "sample").
            content: Binary content to write.
            filename: Name to give the file inside the session directory.

        Returns:
            Path to the written file as a string.
        """
        self.cleanup_file(file_type)
        file_path = self.session_dir / filename

        # Write atomically to prevent partial reads
        temp_path = file_path.with_name(file_path.name + ".tmp")
        with open(temp_path, "wb") as f:
            f.write(content)
        os.replace(temp_path, file_path)

        self.current_files[file_type] = file_path
        return str(file_path)

    def cleanup_file(self, file_type: str) -> None:
        """Remove the active file of a type if it exists.

        Args:
            file_type: Type of file to remove.
        """
        file_path = self.current_files.pop(file_type, None)
        if file_path is not None and file_path.exists():
            try:
                file_path.unlink()
            except OSError as e:
                logger.debug(f"Could not remove {file_path}: {e}")

    def cleanup_all(self) -> None:
        """Remove all tracked files and the session directory.

        Called when the session ends or on explicit cleanup request.
        Safe to call multiple times.
        """
        for file_type in list(self.current_files):
            self.cleanup_file(file_type)

        if self.session_dir.exists():
            try:
                # Remove directory if empty
                self.session_dir.rmdir()
            except OSError:
                logger.debug(f"Session directory {self.session_dir} not removed")
