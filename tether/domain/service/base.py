"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the linking rules that span the identity aggregate,
    the audit log and the ephemeral code store.
    """

    pass
