class AnalysisError(Exception):
    pass


class TokenNotFoundError(AnalysisError):
    pass


class UpstreamTimeoutError(AnalysisError):
    pass


class RateLimitedError(AnalysisError):
    pass


class RemoteBackendError(AnalysisError):
    pass


class InvalidTokenError(AnalysisError):
    """Empty or missing token identifier."""
