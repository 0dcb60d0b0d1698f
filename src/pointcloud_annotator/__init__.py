"""Point-cloud annotator: click a point, attach a note, keep it in a table."""

__version__ = "0.1.0"
