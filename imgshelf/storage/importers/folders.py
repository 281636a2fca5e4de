"""Import image folders from a directory tree.

Every directory that directly contains a JPEG or PNG file is an image
folder. Its first image (by name) is the cover; a JPEG thumbnail of the
cover is stored base64 encoded alongside the folder record.
"""

import base64
import io
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from PIL import Image

from imgshelf.core.models import CoverImage, Folder

from ..backends.sqlite import SQLiteBackend
from ..exceptions import FolderImportError
from ..repository import FolderRepository

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg", ".png"})

LANDSCAPE_BOX = (320, 200)
PORTRAIT_BOX = (200, 320)
THUMBNAIL_QUALITY = 85


@dataclass
class DiscoveredFolder:
    """An image folder found on disk, not yet cataloged."""

    path: Path
    cover_fname: str
    record_time: int
    thumb_base64: str = ""


@dataclass
class ImportReport:
    """Result of a directory import."""

    root: str
    imported: list[Folder] = field(default_factory=list)
    skipped: int = 0
    placeholders: int = 0

    @property
    def scanned(self) -> int:
        return len(self.imported) + self.skipped

    def get_summary(self) -> str:
        lines = [
            f"Scanned folders: {self.scanned}",
            f"Imported: {len(self.imported)}",
        ]
        if self.skipped:
            lines.append(f"Already cataloged: {self.skipped}")
        if self.placeholders:
            lines.append(f"Placeholder covers: {self.placeholders}")
        return "\n".join(lines)


def is_image(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in IMAGE_SUFFIXES


def scan_folders(root: Path) -> list[DiscoveredFolder]:
    """Find image folders under ``root``, subfolders before their parent."""
    found: list[DiscoveredFolder] = []
    cover: Path | None = None

    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning(f"Cannot list {root}: {e}")
        return found

    for entry in entries:
        if entry.is_dir():
            found.extend(scan_folders(entry))
        elif cover is None and is_image(entry):
            cover = entry

    if cover is not None:
        found.append(
            DiscoveredFolder(
                path=root,
                cover_fname=cover.name,
                record_time=int(cover.stat().st_mtime),
            )
        )
    return found


def make_thumbnail(image_path: Path) -> str:
    """Render a base64 JPEG thumbnail, or return "" if the image is unreadable.

    Landscape images fit within 320x200, portrait and square ones within
    200x320, keeping the aspect ratio.
    """
    try:
        with Image.open(image_path) as img:
            thumb = img.convert("RGB")
            box = LANDSCAPE_BOX if thumb.width > thumb.height else PORTRAIT_BOX
            thumb.thumbnail(box, Image.Resampling.LANCZOS)
            buffer = io.BytesIO()
            thumb.save(buffer, format="JPEG", quality=THUMBNAIL_QUALITY)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Cannot create thumbnail for {image_path}: {e}")
        return ""
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@lru_cache(maxsize=1)
def placeholder_base64() -> str:
    """Stand-in cover used when a thumbnail cannot be generated."""
    buffer = io.BytesIO()
    Image.new("RGB", (100, 100), (200, 200, 200)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class FolderImporter:
    """Catalog the image folders found under a directory."""

    def __init__(self, backend: SQLiteBackend):
        self.backend = backend
        self.folders = FolderRepository(backend)

    def import_directory(self, root: Path | str) -> ImportReport:
        """Scan ``root`` and insert every folder not yet cataloged.

        New folders get sequential ids after the current maximum and are
        inserted with their covers in one transaction: either all of them
        are stored or none.

        Raises:
            FolderImportError: If ``root`` is not a directory or the insert
                transaction fails.
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise FolderImportError(str(root), "not a directory")

        report = ImportReport(root=str(root))
        discovered = scan_folders(root)
        known = self.folders.list_folder_paths()
        pending = [d for d in discovered if str(d.path) not in known]
        report.skipped = len(discovered) - len(pending)
        logger.info(f"Found {len(discovered)} image folders under {root}, {len(pending)} new")

        for item in pending:
            item.thumb_base64 = make_thumbnail(item.path / item.cover_fname)
            if not item.thumb_base64:
                report.placeholders += 1

        imported: list[Folder] = []

        def insert(backend: SQLiteBackend) -> bool:
            repo = FolderRepository(backend)
            next_fid = repo.max_fid() + 1
            for item in pending:
                folder = Folder(
                    fid=next_fid,
                    folder_path=str(item.path),
                    title=item.path.name,
                    record_time=item.record_time,
                )
                cover = CoverImage(
                    fid=next_fid,
                    cover_fname=item.cover_fname,
                    cover_base64=item.thumb_base64 or placeholder_base64(),
                )
                repo.add(folder, cover)
                imported.append(folder)
                next_fid += 1
            return True

        if error := self.backend.run_in_transaction(insert):
            raise FolderImportError(str(root), error)

        report.imported = imported
        logger.info(f"Imported {len(imported)} folders from {root}")
        return report
