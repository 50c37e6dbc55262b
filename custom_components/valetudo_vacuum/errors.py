from __future__ import annotations


class ValetudoError(Exception):
    pass


class ValetudoTransportError(ValetudoError):
    """Device unreachable, timed out or answered with a non-2xx status."""


class ValetudoParseError(ValetudoError):
    """Response body was not the JSON shape we expected."""


class ValetudoPreconditionError(ValetudoError):
    """Command refused because of the current device state."""


class ValetudoConfigurationError(ValetudoError):
    pass
