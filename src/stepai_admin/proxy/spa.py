"""Static hosting of the compiled single-page application.

Existing files under the build directory are served as-is; any other path
gets ``index.html`` so client-side routes survive a page reload.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import Response
from fastapi.responses import FileResponse, JSONResponse

INDEX_FILE = "index.html"


def resolve_static(build_dir: Path, request_path: str) -> Path | None:
    """Return the file to serve for *request_path*, or ``None`` without a bundle.

    Paths escaping *build_dir* (``..`` segments) are treated as unmatched
    routes and get the index page.
    """
    root = build_dir.resolve()
    candidate = (root / request_path.lstrip("/")).resolve()
    if candidate.is_relative_to(root) and candidate.is_file():
        return candidate
    index = root / INDEX_FILE
    if index.is_file():
        return index
    return None


def serve_spa(build_dir: Path, request_path: str) -> Response:
    path = resolve_static(build_dir, request_path)
    if path is None:
        return JSONResponse({"success": False, "error": "Not found"}, status_code=404)
    return FileResponse(path)
