"""Generator package - prompt assembly, model calls, and slide output.

Modules:
    prompt: Website context fetch and prompt text
    client: Generation service client
    sanitizer: Response parsing and numeric coercion
    renderer / charts: Pillow slide images
    slideshow: Navigation and PNG export
    pptx_builder: Editable PowerPoint export
"""

from .client import ReportGenerator
from .pptx_builder import PPTXBuilder, build_presentation
from .prompt import ReportRequest, build_prompt, fetch_website_context
from .renderer import SlideRenderer
from .sanitizer import SanitizedReport, sanitize_response
from .slideshow import ExportedSlide, Slideshow, load_slides

__all__ = [
    "ExportedSlide",
    "PPTXBuilder",
    "ReportGenerator",
    "ReportRequest",
    "SanitizedReport",
    "SlideRenderer",
    "Slideshow",
    "build_presentation",
    "build_prompt",
    "fetch_website_context",
    "load_slides",
    "sanitize_response",
]
