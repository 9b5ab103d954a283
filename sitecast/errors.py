"""Exceptions raised by the site pipeline."""


class SitecastError(Exception):
    """Base exception for sitecast"""
    pass


class InputRejected(SitecastError):
    """Submitted input was refused before or instead of running a stage"""
    pass


class CollaboratorError(SitecastError):
    """An external service (crawler, tracker, artifact store) failed"""
    pass


class GenerationError(SitecastError):
    """The generative model did not return a usable site after retries"""
    pass
