# recipebox/clients/base.py
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

# (mime_type, raw bytes)
ImageInput = Tuple[str, bytes]


class AIClient(Protocol):
    """
    What the pipeline needs from a generative-AI backend.

    Every method either returns or raises; backends translate their own
    rate-limit and transport failures into ExtractionError (API_LIMIT /
    NETWORK_ERROR) so the retry wrapper can classify them.
    """

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        *,
        images: Optional[Sequence[ImageInput]] = None,
    ) -> str:
        """Structured generation; returns the raw model text (expected JSON)."""
        ...

    async def generate_text(self, prompt: str, *, search: bool = False) -> str:
        """Free text; ``search=True`` asks for search-grounded answers."""
        ...

    async def generate_image(self, prompt: str) -> Optional[bytes]:
        """PNG bytes, or None if the backend produced no image."""
        ...

    async def synthesize_speech(self, text: str) -> Optional[bytes]:
        """Audio bytes, or None if the backend produced no audio."""
        ...
