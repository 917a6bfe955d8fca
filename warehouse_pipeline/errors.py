"""
Pipeline error types
"""


class PipelineError(Exception):
    """Base class for errors raised by the warehouse pipeline"""


class ParseError(PipelineError):
    """A staged schema file could not be parsed"""

    def __init__(self, message, line=None, source=None):
        self.line = line
        self.source = source

        location = source or '<schema>'
        if line is not None:
            location = f"{location}, line {line}"
        super().__init__(f"{message} ({location})")


class GenerationError(PipelineError):
    """A command could not be generated from the given column descriptors"""


class ExternalCommandFailure(PipelineError):
    """
    A call to the source database, the warehouse or S3 failed

    Args:
        operation (str): What was being attempted (e.g. 'upload', 'execute')
        target (str): The table, key or statement it was attempted on
        cause (Exception, optional): The underlying client error
    """

    def __init__(self, operation, target, cause=None):
        self.operation = operation
        self.target = target
        self.cause = cause

        message = f"{operation} failed for {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
