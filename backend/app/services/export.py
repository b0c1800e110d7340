"""Project export as a downloadable zip archive."""
import io
import re
import zipfile
from typing import Dict


def archive_filename(project_name: str) -> str:
    """Filesystem-safe zip name derived from the project name."""
    safe_name = re.sub(r"[^a-z0-9]", "_", project_name, flags=re.IGNORECASE).lower()
    return f"{safe_name or 'project'}.zip"


def build_project_archive(files: Dict[str, str]) -> bytes:
    """
    Pack the project's files into an in-memory zip.

    Entries keep the insertion order of ``files`` so exports are deterministic.
    Leading slashes and ``..`` segments are stripped from paths.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zipf:
        for path, content in files.items():
            parts = [part for part in path.replace("\\", "/").split("/") if part not in ("", ".", "..")]
            if not parts:
                continue
            zipf.writestr("/".join(parts), content)
    return buffer.getvalue()
