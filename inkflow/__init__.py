"""InkFlow: AI calligraphy signatures composited onto photos.

This package provides the pieces behind the InkFlow web app: loading a photo
and a generated signature image, placing the signature with drags and
sliders, rasterizing the composite with a multiply blend, and exporting the
result as a JPEG. Signatures are generated with Gemini through the
``google-genai`` SDK.

The compositing flow consists of:
1. Decoding the photo and signature into bitmaps
2. Placing the signature (fractional position, scale, rotation)
3. Rendering the composite, capped at 2048 px on the longer side
4. Exporting the last render as a JPEG download

Example:
    Compositing without the web interface:

    >>> import asyncio
    >>> from inkflow.composer import Composer
    >>>
    >>> composer = Composer()
    >>> asyncio.run(composer.load("photo.jpg", "signature.png"))
    >>> composer.set_scale(0.6)
    >>> result = composer.export()
"""
