from enum import Enum

class Role(str, Enum):
    """Roles recognised by the admin API.

    Inherits from *str* so values are JSON-serialisable and comparable with
    the raw ``role`` claim of a token.
    """

    admin = "admin"
    user = "user"
