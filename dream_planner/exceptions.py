# dream_planner/exceptions.py


class GenerationLayerError(Exception):
    """A generation layer could not produce a usable sequence."""


class GenerationTransportError(GenerationLayerError):
    """The text generator could not be reached or did not answer."""


class GenerationShapeError(GenerationLayerError):
    """The text generator answered with something that is not a valid sequence."""
