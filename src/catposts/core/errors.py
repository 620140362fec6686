"""Exception types raised by the rendering pipeline"""


class CatPostsError(Exception):
    """Base class for catposts errors."""


class RepositoryError(CatPostsError):
    """A content repository could not fetch or count items.

    Signals infrastructure trouble (database down, broken query) rather than a
    data or configuration edge case, so renders abort instead of degrading.
    """
