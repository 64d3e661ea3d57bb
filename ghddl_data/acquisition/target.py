# ghddl_data/acquisition/target.py

"""
A single resource the setup run must guarantee is present locally.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AcquisitionTarget(BaseModel):
    """
    Immutable description of one downloadable archive.

    A target with an extracted path is satisfied when that path exists; one
    without is satisfied when its archive exists. Only presence is checked,
    never content.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    remote_url: str
    archive_path: Path
    extracted_path: Optional[Path] = None
    description: str = ""
    size_hint: str = ""

    @property
    def base_dir(self) -> Path:
        """Directory holding the archive; extraction happens here as well."""
        return self.archive_path.parent

    def is_satisfied(self) -> bool:
        # Once extracted, the archive itself is no longer needed.
        if self.extracted_path is not None:
            return self.extracted_path.exists()
        return self.archive_path.exists()
