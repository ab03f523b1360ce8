from enum import Enum


class UserRole(str, Enum):
    USER  = "user"
    ADMIN = "admin"
    RIDER = "rider"


class DeliveryStatus(str, Enum):
    PENDING             = "pending"
    RIDER_ASSIGNED      = "rider_assigned"
    IN_TRANSIT          = "in_transit"
    DELIVERED           = "delivered"
    DELIVERED_TO_CENTER = "delivered_to_center"


class RiderStatus(str, Enum):
    PENDING     = "pending"
    ACTIVE      = "active"
    CANCELLED   = "cancelled"
    DEACTIVATED = "deactivated"


class WorkStatus(str, Enum):
    IDLE        = "idle"
    IN_DELIVERY = "in_delivery"


class CashoutStatus(str, Enum):
    NONE       = "none"
    CASHED_OUT = "cashed_out"
