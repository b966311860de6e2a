"""Application services."""

from timelapse.application.services.entry_service import EntryDraft, EntryService, ProjectEntry
from timelapse.application.services.project_service import ProjectService

__all__ = ["ProjectService", "EntryService", "EntryDraft", "ProjectEntry"]
