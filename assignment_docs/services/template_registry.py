"""
Template discovery on the local template directory.

Templates follow the ``{COLLEGE_CODE}_{individual|group}.docx`` naming
convention, matched case-insensitively, with ``default_{type}.docx`` as the
fallback. Word lock files (``~$...``) are ignored.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from assignment_docs.exceptions import TemplateNotFoundError
from assignment_docs.models.schemas import TemplateInfo

logger = logging.getLogger(__name__)

TEMPLATE_TYPES = ("individual", "group")
DEFAULT_TEMPLATE_CODE = "default"

_TEMPLATE_NAME_RE = re.compile(r"^(.+)_(individual|group)\.docx$", re.IGNORECASE)
_LOCK_FILE_PREFIX = "~$"


class TemplateRegistry:
    """Looks up and lists DOCX templates in one directory."""

    def __init__(self, template_dir: Union[str, Path]) -> None:
        self.template_dir = Path(template_dir)

    def _candidates(self) -> List[Path]:
        if not self.template_dir.is_dir():
            return []
        return sorted(
            p
            for p in self.template_dir.iterdir()
            if p.is_file()
            and p.suffix.lower() == ".docx"
            and not p.name.startswith(_LOCK_FILE_PREFIX)
        )

    def _find(self, filename: str) -> Optional[Path]:
        wanted = filename.lower()
        for path in self._candidates():
            if path.name.lower() == wanted:
                return path
        return None

    def get_template_path(self, college_code: str, template_type: str) -> Path:
        """
        Resolve the template file for a college and assignment type.

        Args:
            college_code:  College code, any case.
            template_type: "individual" or "group".

        Returns:
            Path to the college-specific template, else the default one.

        Raises:
            ValueError:            Unknown template type.
            TemplateNotFoundError: Neither file exists.
        """
        template_type = template_type.lower()
        if template_type not in TEMPLATE_TYPES:
            raise ValueError(f"Unknown template type: {template_type!r}")

        code = college_code.strip()
        path = self._find(f"{code}_{template_type}.docx") if code else None
        if path is not None:
            return path

        fallback = self._find(f"{DEFAULT_TEMPLATE_CODE}_{template_type}.docx")
        if fallback is not None:
            logger.info(
                "No %s template for %r, using %s", template_type, college_code, fallback.name
            )
            return fallback

        raise TemplateNotFoundError(
            f"Template not found for {college_code!r} ({template_type}) "
            f"and no {DEFAULT_TEMPLATE_CODE}_{template_type}.docx in {self.template_dir}"
        )

    def list_templates(self) -> List[TemplateInfo]:
        """Every template file whose name follows the naming convention."""
        templates: List[TemplateInfo] = []
        for path in self._candidates():
            match = _TEMPLATE_NAME_RE.match(path.name)
            if not match:
                logger.debug("Ignoring non-template file %s", path.name)
                continue

            stat = path.stat()
            templates.append(
                TemplateInfo(
                    college_code=match.group(1).upper(),
                    template_type=match.group(2).lower(),
                    filename=path.name,
                    path=str(path),
                    size=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime),
                )
            )
        return templates
