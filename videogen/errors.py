class VideoGenError(Exception):
    """Base class for failures that end a generation run."""


class RuntimeInitError(VideoGenError):
    pass


class VideoUnavailableError(VideoGenError):
    pass


class InvalidDimensionsError(VideoGenError, ValueError):
    pass


class PipelineLoadError(VideoGenError):
    pass


class GenerationError(VideoGenError):
    pass
