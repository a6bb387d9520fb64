"""
Photo analysis around the skin analysis agent.

The photo is normalised with Pillow (format check, downscale, RGB JPEG)
before it reaches the model. Whatever goes wrong, the visitor gets the
fixed fallback scores and the funnel carries on.
"""

import logging
from io import BytesIO

from PIL import Image
from pydantic_ai import BinaryContent

from scanbeauty.agents.skin_analysis import skin_analysis_agent
from scanbeauty.errors import log_error
from scanbeauty.schemas import SkinAnalysisResult, SkinScores

logger = logging.getLogger(__name__)

FALLBACK_SCORES = SkinScores(
    hydration=6,
    elasticity=7,
    pigmentation=6,
    acne=7,
    wrinkles=7,
    pores=6,
    redness=7,
)

# Score at or below which the parameter becomes a suggested quiz concern
CONCERN_THRESHOLD = 4

SCORE_CONCERNS = {
    "redness": "rossori",
    "acne": "acne",
    "wrinkles": "rughe",
    "pigmentation": "pigmentazione",
    "pores": "pori_dilatati",
    "hydration": "disidratazione",
    "elasticity": "elasticita",
}


class ImageProcessor:
    def __init__(self):
        self.valid_formats = {"JPEG", "PNG", "WEBP"}
        self.max_size = (1024, 1024)  # Maximum image dimensions

    def process_image(self, image_data: bytes) -> bytes:
        """Validate and normalise an uploaded photo to an RGB JPEG."""
        image = Image.open(BytesIO(image_data))

        if image.format not in self.valid_formats:
            raise ValueError(f"Invalid image format. Supported formats: {self.valid_formats}")

        if image.size[0] > self.max_size[0] or image.size[1] > self.max_size[1]:
            image.thumbnail(self.max_size, Image.Resampling.LANCZOS)

        if image.mode != "RGB":
            image = image.convert("RGB")

        output = BytesIO()
        image.save(output, format="JPEG", quality=85)
        return output.getvalue()


def suggested_concerns(scores: SkinScores) -> list[str]:
    values = scores.model_dump()
    return [
        concern
        for field, concern in SCORE_CONCERNS.items()
        if values[field] <= CONCERN_THRESHOLD
    ]


class SkinAnalysisService:
    def __init__(self, processor: ImageProcessor | None = None):
        self.processor = processor or ImageProcessor()

    async def analyze(self, image_data: bytes) -> SkinAnalysisResult:
        try:
            photo = self.processor.process_image(image_data)
            result = await skin_analysis_agent.run(
                [
                    "Analizza la pelle in questa foto.",
                    BinaryContent(data=photo, media_type="image/jpeg"),
                ]
            )
            scores = result.output
        except Exception as e:
            log_error(e, "analyze_skin")
            return SkinAnalysisResult(scores=FALLBACK_SCORES, is_fallback=True)

        logger.info(f"Skin analysis completed: {scores.model_dump()}")
        return SkinAnalysisResult(scores=scores, suggested_concerns=suggested_concerns(scores))
