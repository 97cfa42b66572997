from .user import User, UserRole, is_valid_role
from .villa import Villa
from .room import Room, RoomStatus
from .reservation import Reservation, ReservationStatus
from .reservation_history import ReservationHistory
