"""Data models for the AdStudio wizard state."""

import logging
import shutil
import tempfile
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

from adstudio.core.rules import DEFAULT_ADS, guess_image_type

logger = logging.getLogger(__name__)

# Preview copies are owned by the wizard and removed on release.
PREVIEW_DIR = Path(tempfile.gettempdir()) / "adstudio-previews"


class WizardStep(IntEnum):
    """The four linear wizard steps."""

    PRODUCT_INFO = 1
    UPLOAD_IMAGES = 2
    GUIDANCE = 3
    RESULTS = 4


@dataclass
class UploadedImage:
    """A source image accepted by the wizard.

    Attributes
    ----------
    source_path : Path
        File selected by the user (what gets submitted)
    filename : str
        Display name
    content_type : str
        MIME type derived from the filename
    size_bytes : int
        File size at selection time
    preview_path : Path | None
        Local copy shown in the preview gallery; None once released
    """

    source_path: Path
    filename: str
    content_type: str
    size_bytes: int
    preview_path: Path | None = None

    @classmethod
    def describe(cls, path: str | Path) -> "UploadedImage":
        """Describe a selected file without creating a preview yet."""
        path = Path(path)
        return cls(
            source_path=path,
            filename=path.name,
            content_type=guess_image_type(path.name) or "application/octet-stream",
            size_bytes=path.stat().st_size,
        )

    def create_preview(self) -> Path:
        """Copy the source into the preview directory and remember the copy."""
        PREVIEW_DIR.mkdir(parents=True, exist_ok=True)
        preview = PREVIEW_DIR / f"{uuid.uuid4()}{self.source_path.suffix.lower()}"
        shutil.copyfile(self.source_path, preview)
        self.preview_path = preview
        return preview

    def release(self) -> None:
        """Delete the preview copy.  Safe to call more than once."""
        if self.preview_path is None:
            return
        try:
            self.preview_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not release preview {self.preview_path}: {e}")
        self.preview_path = None

    @property
    def size_mb(self) -> float:
        return self.size_bytes / 1024 / 1024


@dataclass
class WizardState:
    """Session state for the ad wizard.

    Each browser session gets its own instance (held in ``gr.State``), so
    nothing here is shared between users.  Fields only change through the
    transition functions in :mod:`adstudio.ui.state`.
    """

    step: WizardStep = WizardStep.PRODUCT_INFO
    product_name: str = ""
    images: list[UploadedImage] = field(default_factory=list)
    guidance_prompt: str = ""
    number_of_ads: int = DEFAULT_ADS

    is_submitting: bool = False
    error: str = ""
    generated_images: list[str] = field(default_factory=list)

    @property
    def progress(self) -> float:
        """Fraction of the wizard completed (0.0 on step 1, 1.0 on results)."""
        return (int(self.step) - 1) / (len(WizardStep) - 1)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"WizardState(step={self.step.name}, "
            f"images={len(self.images)}, "
            f"ads={self.number_of_ads}, "
            f"results={len(self.generated_images)})"
        )
