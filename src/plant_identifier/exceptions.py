"""Exceptions raised where a caller has to choose a fallback."""


class PlantIdentifierError(Exception):
    """Base class for service errors."""


class IdentificationError(PlantIdentifierError):
    """Every configured image-recognition credential failed."""


class GenerationError(PlantIdentifierError):
    """The language model could not be reached or is not configured."""
