"""Error kinds raised by the tag query and mutation engine."""


class TagliatelleError(Exception):
    """Base class for all engine errors."""


class MalformedFilterPath(TagliatelleError):
    """A filter path segment did not split into category and value."""

    def __init__(self, segment: str):
        self.segment = segment
        super().__init__(f"invalid tag filter segment '{segment}', expected 'category/value'")


class InvalidTagSyntax(TagliatelleError):
    """A tag query pair lacks the 'category:value' form."""

    def __init__(self, pair: str):
        self.pair = pair
        super().__init__(f"invalid tag format '{pair}', expected 'category:value'")


class EmptyQuery(TagliatelleError):
    """No tag pairs remained after trimming the query."""

    def __init__(self, query: str = "", message: str = ""):
        self.query = query
        super().__init__(message or "no valid tags found in query")


class InvalidRange(TagliatelleError):
    """An ID range token is not a number or a well-formed 'start-end' range."""

    def __init__(self, token: str, reason: str):
        self.token = token
        super().__init__(f"invalid range '{token}': {reason}")


class UnknownCategory(TagliatelleError):
    """Category does not exist."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"cannot remove non-existent category: {category}")


class UnknownTag(TagliatelleError):
    """Tag does not exist under its category."""

    def __init__(self, category: str, value: str, message: str = ""):
        self.category = category
        self.value = value
        super().__init__(message or f"cannot remove non-existent tag: {category}={value}")


class InvalidOperation(TagliatelleError):
    """Bulk operation is neither 'add' nor 'remove'."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(message or f"invalid operation: {operation} (must be 'add' or 'remove')")


class MissingField(TagliatelleError):
    """A required field was empty."""


class FileNotFound(TagliatelleError):
    """File ID does not exist."""

    def __init__(self, file_id: int):
        self.file_id = file_id
        super().__init__(f"file {file_id} not found")


class FileConflict(TagliatelleError):
    """Another stored file already has the requested name."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"a file named '{filename}' already exists")


class InvalidAliasConfig(TagliatelleError):
    """Alias groups failed validation."""


class StoreFailure(TagliatelleError):
    """Wraps an underlying persistence error."""
