class CookedError(Exception):
    """Base class for errors raised by this package."""


class LeagueLoadError(CookedError):
    """The requested league could not be loaded at all.

    Raised only for the league record, rosters and users of the league the
    caller asked for. Everything fetched afterwards degrades to empty data.
    """

    def __init__(self, message: str, league_id: str, status_code: int = 404):
        super().__init__(message)
        self.message = message
        self.league_id = league_id
        self.status_code = status_code
