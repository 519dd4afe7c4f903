class JavaFactsError(Exception):
    """Base error for the extraction pipeline."""


class SourceParseError(JavaFactsError, ValueError):
    """The tree producer could not turn a source file into a syntax tree."""


class OutputWriteError(JavaFactsError):
    """The assembled documents could not be written to their destination."""
