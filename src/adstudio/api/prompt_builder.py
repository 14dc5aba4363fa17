"""Generation instruction composition for the ad relay.

The image API receives a single natural-language instruction.  The product
name is quoted and the user's guidance follows verbatim.

Usage
-----
::

    prompt = build_ad_prompt("Premium Coffee Beans", "On a wooden table, morning light.")
"""

from __future__ import annotations

_AD_TEMPLATE = 'Generate a photorealistic ad image for "{product}" with the following guidance: {guidance}'


def build_ad_prompt(product_name: str, guidance_prompt: str) -> str:
    """Compose the instruction sent to the image API.

    Surrounding whitespace is trimmed from both parts; inner whitespace and
    line breaks in the guidance are kept because users often write the
    guidance as a short list.

    Args:
        product_name: Name of the advertised product.
        guidance_prompt: Free-text description of the desired ad.

    Returns:
        The complete instruction string.
    """
    return _AD_TEMPLATE.format(product=product_name.strip(), guidance=guidance_prompt.strip())
