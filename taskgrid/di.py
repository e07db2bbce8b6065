# taskgrid/di.py
from dataclasses import dataclass
from typing import Optional

from taskgrid.config import Settings
from taskgrid.services.assistant import AssistantToolService
from taskgrid.services.context import FileContextService
from taskgrid.services.filesystem import SandboxFileService

@dataclass
class Container:
    settings: Settings
    fs_service: SandboxFileService
    context_service: FileContextService
    assistant_service: AssistantToolService

def build_container(settings: Optional[Settings] = None) -> Container:
    s = settings or Settings()
    fs = SandboxFileService()
    context = FileContextService(
        fs=fs,
        max_files=s.CONTEXT_MAX_FILES,
        max_depth=s.CONTEXT_MAX_DEPTH,
    )
    assistant = AssistantToolService(fs=fs)
    return Container(s, fs, context, assistant)
