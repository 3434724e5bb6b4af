"""Release of uploaded image files that are no longer referenced."""

from __future__ import annotations

import logging
from pathlib import Path

from pulseboard.core.settings import settings

logger = logging.getLogger(__name__)


class ImageStore:
    """Local directory holding uploaded post images."""

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root if root is not None else settings.image_dir)

    def path_for(self, image_url: str) -> Path:
        # Only the file name is honoured so a stored URL cannot escape the root.
        return self.root / Path(image_url).name

    def release(self, image_url: str | None) -> bool:
        """Delete the file behind ``image_url``.

        Returns:
            True if a file was removed; a missing file is logged and ignored.
        """
        if not image_url:
            return False
        target = self.path_for(image_url)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning("Image %s already gone", target)
            return False
        except OSError as exc:
            logger.error("Could not remove image %s: %s", target, exc)
            return False
        logger.info("Released image %s", target)
        return True
