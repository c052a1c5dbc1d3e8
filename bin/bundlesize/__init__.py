"""Bundle size governance: measure compiled bundles and hold them to their size budgets."""


class BundleSizeError(RuntimeError):
    """Base class for fatal errors that abort a size analysis run."""
