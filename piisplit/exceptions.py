class PiiSplitError(Exception):
    """
    Base exception for all PII screening errors
    """
    pass


class InvalidInput(PiiSplitError):
    """
    Raised when the dataset or the caller's arguments are malformed
    (not a DataFrame, duplicate column names, unknown excluded column, ...)
    """
    pass


class ComputationDegenerate(PiiSplitError):
    """
    Raised when a dataset statistic needed for a threshold is undefined.
    Detection treats it as "no match"; it never leaves the engine.
    """
    pass


class JoinKeyError(PiiSplitError):
    """
    Raised when a join key generator returns the wrong number of keys
    or repeats a key within one call
    """
    pass
