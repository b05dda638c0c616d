"""Exception types for QuantPilot."""


class QuantPilotError(Exception):
    """Base class for all QuantPilot errors."""


class ExternalServiceError(QuantPilotError):
    """The generation service call could not complete.

    Covers network, authentication, rate-limit and timeout failures.
    """


class MalformedResponseError(QuantPilotError):
    """The generation service replied, but the payload was unusable."""


class ConfigurationError(QuantPilotError):
    """Settings or bot configuration failed to load or validate."""


class SessionBusyError(QuantPilotError):
    """A chat turn was started while the previous one is still pending."""


# Failures a generation call may surface. OSError covers injected clients
# that let transport errors through unmapped.
GENERATION_FAILURES = (ExternalServiceError, MalformedResponseError, OSError)
