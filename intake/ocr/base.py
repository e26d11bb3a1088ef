from abc import ABC, abstractmethod
from collections.abc import Callable

from PIL import Image

FractionCallback = Callable[[float], None]


class BaseOcrEngine(ABC):
    """Contract for all OCR engine adapters."""

    @abstractmethod
    def recognize(
        self,
        image: Image.Image,
        on_progress: FractionCallback | None = None,
    ) -> str:
        """Recognize text in an image.

        Args:
            image: Pixel surface to recognize (a photo or a rendered PDF page).
            on_progress: Optional callback receiving the engine's own
                         progress as a fraction in [0, 1].

        Returns:
            Recognized text, possibly empty.

        Raises:
            OcrError: if the engine fails.
        """
