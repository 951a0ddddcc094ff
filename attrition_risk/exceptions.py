"""Exception types raised by the attrition risk pipeline."""


class SchemaError(ValueError):
    """Bundle document failed required-key or length-consistency checks."""


class BundleSourceError(ValueError):
    """Bundle document could not be located or parsed."""


class RuntimeComputeError(RuntimeError):
    """A single prediction failed while vectorizing, scaling or scoring."""


class BundleNotLoadedError(RuntimeError):
    """Prediction attempted before a bundle was successfully loaded."""

    def __init__(self, message: str = "Bundle not loaded"):
        super().__init__(message)


class SessionStateError(RuntimeError):
    """Illegal transition of the prediction session state machine."""
