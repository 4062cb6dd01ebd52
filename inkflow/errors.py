"""Exception hierarchy for the InkFlow core.

Every failure raised by the core is recoverable: the UI catches these at the
callback boundary, reports them to the user and lets them retry.
"""


class InkflowError(Exception):
    """Base exception for all InkFlow errors."""

    pass


class ImageDecodeError(InkflowError):
    """Exception raised when a source image cannot be read or decoded."""

    pass


class SurfaceNotReadyError(InkflowError):
    """Exception raised when the surface is loading or has not been rendered."""

    pass


class SignatureError(InkflowError):
    """Base exception for signature generation failures.

    Attributes:
        user_message: Text suitable for showing to the end user.
    """

    user_message = "Signature generation failed."

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(detail or self.user_message)


class InvalidNameError(SignatureError):
    """Exception raised when the name to write is blank."""

    user_message = "Please enter the name to write before generating."


class MissingCredentialError(SignatureError):
    """Exception raised when no API key has been configured."""

    user_message = (
        "No API key configured. Open Settings and save your Gemini API key "
        "before generating a signature."
    )


class RemoteServiceError(SignatureError):
    """Exception raised when the generation request fails or times out."""

    user_message = (
        "Generation failed: the AI service could not be reached or returned "
        "an error. Check your network or the alternate base URL in Settings."
    )


class NoImageDataError(SignatureError):
    """Exception raised when the response carries no inline image data."""

    user_message = (
        "The AI service returned no image data. Make sure the configured "
        "model supports image output and that any proxy forwards binary data."
    )
