"""Domain pipeline constants."""

import re

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

VALID_GENDERS = frozenset({"M", "F"})

# Substrings that mark a validation summary as a pass. Weak signal: the model
# gives no structured verdict, so this is plain keyword sniffing.
VALIDATION_SUCCESS_KEYWORDS: tuple[str, ...] = ("looks good", "consistent")

OCR_SUCCESS_EXIT_CODE = 1

COMPLETION_EMPTY_MESSAGE = (
    "AI failed to generate improved extraction data. The response from the model was empty or invalid."
)
VALIDATION_EMPTY_MESSAGE = (
    "AI failed to generate validation data. The response from the model was empty or invalid."
)
NO_TEXT_MESSAGE = "No text found by OCR."
UNKNOWN_OCR_ERROR = "Unknown OCR error"

# Stage names used for logging and metrics labels
STAGE_OCR = "ocr"
STAGE_COMPLETION = "completion"
STAGE_NORMALIZE = "normalize"
STAGE_VALIDATION = "validation"
