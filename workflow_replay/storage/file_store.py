"""File persistence for screenshots and downloaded uploads."""
import mimetypes
import re
import tempfile
from pathlib import Path
from typing import Optional

from workflow_replay.errors import ActionError
from workflow_replay.utils.config import config
from workflow_replay.utils.logger import setup_logger


def _safe_filename(filename: str) -> str:
    # Keep the name but never let it escape the target directory
    name = Path(filename).name
    return re.sub(r"[^\w.\-]", "_", name) or "file"


class FileStore:
    """Writes artifact bytes under the configured artifacts directory."""

    def __init__(self, output_dir: Optional[Path] = None, temp_dir: Optional[Path] = None):
        """
        Args:
            output_dir: Where save_file() writes. Defaults to artifacts/screenshots/
            temp_dir: Where save_temporary_file() writes. Defaults to artifacts/uploads/
        """
        self.output_dir = Path(output_dir) if output_dir else config.screenshots_dir
        self.temp_dir = Path(temp_dir) if temp_dir else config.uploads_dir
        self.logger = setup_logger("FileStore")

    def save_file(self, data: bytes, filename: str) -> Path:
        """Save bytes under filename, overwriting any previous file."""
        path = self.output_dir / _safe_filename(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise ActionError(f"Failed to save {path.name}: {e}") from e

        self.logger.debug(f"Saved {len(data)} bytes to {path}")
        return path

    def save_temporary_file(self, data: bytes, mime_type: Optional[str] = None) -> Path:
        """Save bytes to a uniquely named file whose extension matches mime_type."""
        suffix = ""
        if mime_type:
            suffix = mimetypes.guess_extension(mime_type.split(";")[0].strip()) or ""

        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self.temp_dir, prefix="upload_", suffix=suffix, delete=False
            ) as f:
                f.write(data)
                path = Path(f.name)
        except OSError as e:
            raise ActionError(f"Failed to save temporary file: {e}") from e

        self.logger.debug(f"Saved temporary file {path} ({mime_type or 'unknown type'})")
        return path

    def remove(self, path: Path):
        """Delete a file written by save_temporary_file(); a missing file is fine."""
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove temporary file {path}: {e}")
