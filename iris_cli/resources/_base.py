"""
Base class shared by every SDK resource.
"""


class Resource:
    """Holds the transport and the credentials user-scoped paths read."""

    def __init__(self, http, credentials):
        self._http = http
        self._credentials = credentials

    def __repr__(self):
        return f"{type(self).__name__}()"

    def _user_id(self):
        return self._credentials.require_user_id()
