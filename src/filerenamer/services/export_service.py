from __future__ import annotations

import io
import logging
import zipfile

from filerenamer.domain.export_rendering import RenamingMapRow, render_renaming_csv
from filerenamer.domain.models import ExportArtifact, FileDescriptor, RenamePlanEntry
from filerenamer.domain.rename_logic import get_extension
from filerenamer.errors import BatchProcessingError, InputValidationError
from filerenamer.ports.byte_source_port import ByteSourcePort
from filerenamer.services.time_utils import epoch_millis

logger = logging.getLogger(__name__)

ZIP_COMPRESSION_LEVEL = 6


class ExportService:
    def __init__(self, byte_source: ByteSourcePort) -> None:
        self._byte_source = byte_source

    def export_csv(
        self, plan: list[RenamePlanEntry], files: list[FileDescriptor]
    ) -> ExportArtifact:
        selected = self._selected(plan, files)
        rows = [
            RenamingMapRow(
                original_name=file.original_name,
                final_name=entry.final_name,
                confidence=entry.proposal.confidence,
                rationale=entry.proposal.rationale,
            )
            for entry, file in selected
        ]
        content = render_renaming_csv(rows)
        return ExportArtifact(
            filename=f"renaming-map-{epoch_millis()}.csv",
            content=content.encode("utf-8"),
            media_type="text/csv",
        )

    def build_zip(
        self,
        plan: list[RenamePlanEntry],
        files: list[FileDescriptor],
        zip_name: str | None = None,
    ) -> ExportArtifact:
        """Store each selected file under its final name; unreadable files are skipped."""

        selected = self._selected(plan, files)
        buffer = io.BytesIO()
        added = 0
        used_names: set[str] = set()
        try:
            with zipfile.ZipFile(
                buffer,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=ZIP_COMPRESSION_LEVEL,
            ) as archive:
                for entry, file in selected:
                    member_name = _unique_member_name(entry.final_name, used_names)
                    if member_name != entry.final_name:
                        logger.warning(
                            "Duplicate archive name %s for file %s stored as %s",
                            entry.final_name,
                            file.file_id,
                            member_name,
                        )
                    if self._add_to_archive(archive, member_name, entry, file):
                        used_names.add(member_name)
                        added += 1
        except (OSError, zipfile.BadZipFile) as exc:
            raise BatchProcessingError("Failed to generate ZIP file") from exc
        logger.info("Built archive with %d of %d files", added, len(selected))
        return ExportArtifact(
            filename=zip_name or f"renamed-files-{epoch_millis()}.zip",
            content=buffer.getvalue(),
            media_type="application/zip",
        )

    def _add_to_archive(
        self,
        archive: zipfile.ZipFile,
        member_name: str,
        entry: RenamePlanEntry,
        file: FileDescriptor,
    ) -> bool:
        try:
            data = self._byte_source.fetch_bytes(file.content_ref)
        except Exception:
            logger.exception(
                "Failed to add file %s (%s) to archive", entry.final_name, file.file_id
            )
            return False
        archive.writestr(member_name, data)
        return True

    @staticmethod
    def _selected(
        plan: list[RenamePlanEntry], files: list[FileDescriptor]
    ) -> list[tuple[RenamePlanEntry, FileDescriptor]]:
        files_by_id = {file.file_id: file for file in files}
        selected = [
            (entry, files_by_id[entry.file_id])
            for entry in plan
            if entry.included and entry.file_id in files_by_id
        ]
        if not selected:
            raise InputValidationError("No files provided")
        return selected


def _unique_member_name(name: str, used_names: set[str]) -> str:
    """Version `name` as `stem-vN.ext` until it is not already in the archive."""

    if name not in used_names:
        return name
    ext = get_extension(name)
    stem = name[: len(name) - len(ext)]
    version = 2
    while f"{stem}-v{version}{ext}" in used_names:
        version += 1
    return f"{stem}-v{version}{ext}"
