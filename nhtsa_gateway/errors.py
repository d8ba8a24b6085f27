"""
NHTSA lookup failures.

These never escape NHTSAClient's public methods: every one of them ends up
as a None result.  They exist so the client can tell the causes apart in
its logs.

    InvalidInputError         - bad VIN / year / make / model, no request made
    UpstreamUnavailableError  - transport failure, HTTP error, bad JSON
    UpstreamSemanticError     - valid JSON that says "nothing found"
"""


class NHTSAError(Exception):
    """Base class for lookup failures."""


class InvalidInputError(NHTSAError):
    """Request parameters failed validation."""


class UpstreamUnavailableError(NHTSAError):
    """The NHTSA API could not be reached or returned garbage."""


class UpstreamSemanticError(NHTSAError):
    """The NHTSA API answered, but with an empty or error result."""
