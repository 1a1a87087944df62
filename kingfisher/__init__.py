"""Git blob ids, commit metadata, repository URLs, options, filesystem walking and repository listing."""

__version__ = "1.10.0"