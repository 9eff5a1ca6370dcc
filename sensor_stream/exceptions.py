class DuplicateClientError(KeyError):
    """A client id was registered twice within one transport registry."""
