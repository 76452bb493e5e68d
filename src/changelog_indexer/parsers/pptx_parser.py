"""
PowerPoint parser using python-pptx
"""
import io

from pptx import Presentation

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions


class PPTXParser(BaseParser):
    """Collects shape text slide by slide"""

    kind = ContentKind.PRESENTATION

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        prs = Presentation(io.BytesIO(file_content))

        slides = []
        for slide_num, slide in enumerate(prs.slides, 1):
            slide_text = [
                shape.text for shape in slide.shapes
                if shape.has_text_frame and shape.text
            ]
            if slide_text:
                slides.append(f"Slide {slide_num}: " + " ".join(slide_text))

        self.logger.info(f"Extracted PPTX text ({len(prs.slides)} slides)")
        return "\n\n".join(slides)
