"""Errors raised while loading streaming history exports"""


class ListeningDataError(ValueError):
    """Base class for unusable listening history input"""


class ParseError(ListeningDataError):
    """The source is not a JSON array of objects"""


class SchemaError(ListeningDataError):
    """A record is missing a required field or holds an unparseable value"""

    def __init__(self, index, field, message):
        self.index = index
        self.field = field
        super().__init__(f"Record {index}: {field} {message}")
