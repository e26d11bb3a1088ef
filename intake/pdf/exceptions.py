class RenderError(Exception):
    """Raised when a PDF cannot be opened or one of its pages cannot be rendered."""
