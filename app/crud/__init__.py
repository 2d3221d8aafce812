# Import individual CRUD modules so they can be accessed via the package
from . import crud_user # noqa
from . import crud_booking # noqa
from . import crud_notification # noqa
from .crud_room import room # noqa
from .crud_announcement import announcement # noqa
from .crud_feedback import feedback # noqa

__all__ = [
    "crud_user",
    "crud_booking",
    "crud_notification",
    "room",
    "announcement",
    "feedback",
]
