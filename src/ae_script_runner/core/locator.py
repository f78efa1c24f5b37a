"""
Decide which file is sent to After Effects for a run.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from .error_handling import NoActiveDocumentError
from .host import ActiveDocument
from .models import WORKSPACE_PLACEHOLDER, ResolvedScript, RunnerSettings

logger = logging.getLogger(__name__)

SIBLING_TEMP_NAME = "ae-temp-script.jsx"


async def resolve_script_path(
    settings: RunnerSettings,
    document: Optional[ActiveDocument],
    workspace_folders: Sequence[str] = (),
) -> ResolvedScript:
    """
    Resolve the absolute path of the script to execute.

    A configured ``execute_file`` always wins. Otherwise the active document
    is used: saved documents run from disk, anything else is written to a
    temporary file which the caller removes after the run.

    Args:
        settings: Runner options
        document: Active document, if any
        workspace_folders: Open workspace folders, first one is the base

    Returns:
        ResolvedScript with the path and whether it is temporary

    Raises:
        NoActiveDocumentError: No execute path configured and no document
        OSError: The temporary file could not be written
    """
    base = workspace_folders[0] if workspace_folders else None

    execute_file = settings.execute_file
    if execute_file and execute_file.strip():
        candidate = Path(execute_file.strip()).expanduser()
        if not candidate.is_absolute():
            candidate = Path(base or os.getcwd()) / candidate
        return ResolvedScript(path=os.path.abspath(candidate), is_temp=False)

    if document is None:
        raise NoActiveDocumentError()

    if not document.is_untitled and document.file_name:
        if not document.is_dirty:
            return ResolvedScript(path=document.file_name, is_temp=False)

        if settings.save_before_run:
            try:
                await document.save()
                if not document.is_dirty:
                    return ResolvedScript(path=document.file_name, is_temp=False)
                logger.warning(f"{document.file_name} is still modified after saving")
            except Exception as e:
                logger.warning(f"Save failed, using temporary file instead: {e}")

        temp_path = Path(document.file_name).parent / SIBLING_TEMP_NAME
    else:
        template = settings.temp_file
        if WORKSPACE_PLACEHOLDER in template:
            template = template.replace(WORKSPACE_PLACEHOLDER, base or tempfile.gettempdir())
        temp_path = Path(os.path.abspath(Path(template).expanduser()))

    temp_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path.write_text(document.get_text(), encoding="utf-8")
    logger.debug(f"Wrote document text to {temp_path}")
    return ResolvedScript(path=str(temp_path), is_temp=True)
