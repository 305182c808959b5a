"""
Exception hierarchy for the sentiment pipeline.
"""


class SentimentError(Exception):
    """Base class for all errors raised by remark_sentiment."""
    pass


class LoadError(SentimentError):
    """Raised when a model or metadata artifact cannot be fetched or parsed."""
    pass


class LoadTimeoutError(LoadError):
    """Raised when loading does not complete within the allowed time."""
    pass


class InferenceError(SentimentError):
    """Raised when the model is called before loading or with a wrongly shaped input."""
    pass


class ClassifyError(SentimentError):
    """Raised for input the classifier refuses to process."""
    pass


class EmptyInputError(ClassifyError):
    """Raised when the input text is empty or whitespace only."""
    pass


class InvariantViolation(SentimentError):
    """Raised when the model produces a score outside [0, 1]."""
    pass
