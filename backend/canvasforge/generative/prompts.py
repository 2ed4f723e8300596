"""Instructions sent to the generative image service."""

from __future__ import annotations

from ..models import Dimensions

EXTENSION_PROMPT = (
    "Extend this {orig_w}x{orig_h} image to exactly {target_w}x{target_h} pixels "
    "by adding new background around it.\n"
    "Strict rules:\n"
    "1. Keep the original image content exactly as it is: do not scale, crop, "
    "move or redraw it.\n"
    "2. Only add new background in the surrounding area so it continues the "
    "existing background seamlessly, matching its style, colors, lighting and "
    "textures.\n"
    "3. Keep the subject centered in the {target_w}x{target_h} canvas.\n"
    "4. No visible border, seam or frame between the original and the new area."
)

ENHANCEMENT_PROMPT = (
    "Enhance this image: improve sharpness, clarity and detail, reduce noise "
    "and compression artifacts, and balance exposure and color. Keep the "
    "composition, subject, framing and dimensions exactly the same. Do not add, "
    "remove or restyle any content."
)


def build_extension_prompt(original: Dimensions, target: Dimensions) -> str:
    return EXTENSION_PROMPT.format(
        orig_w=original.width,
        orig_h=original.height,
        target_w=target.width,
        target_h=target.height,
    )
