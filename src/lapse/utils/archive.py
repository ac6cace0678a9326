"""Archive extraction backend (zip)."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from lapse.core.errors import ExtractionError

logger = logging.getLogger(__name__)


class ZipArchiveExtractor:
    """Unpack a zip archive, refusing members that would land outside the destination."""

    def extract(self, archive_path: Path, destination: Path) -> list[Path]:
        archive_path = Path(archive_path)
        destination = Path(destination)
        root = destination.resolve()
        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                members = [info for info in zf.infolist() if not info.is_dir()]
                if not members:
                    raise ExtractionError(f"Archive {archive_path.name} contains no files")
                extracted = []
                for info in members:
                    target = (root / info.filename).resolve()
                    if not target.is_relative_to(root):
                        raise ExtractionError(f"Unsafe archive member path: {info.filename}")
                    zf.extract(info, root)
                    extracted.append(target)
        except zipfile.BadZipFile as exc:
            raise ExtractionError(f"Cannot read archive {archive_path.name}: {exc}") from exc
        except (OSError, RuntimeError) as exc:
            # RuntimeError: encrypted members without a password
            raise ExtractionError(f"Extraction of {archive_path.name} failed: {exc}") from exc

        logger.info(f"Extracted {len(extracted)} files from {archive_path.name}")
        return extracted
