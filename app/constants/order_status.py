from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    VENDOR = "VENDOR"
    USER = "USER"


class AccountStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PROCESSING = "PROCESSING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDING = "REFUNDING"
    REFUNDED = "REFUNDED"


class TransferStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PaymentType(str, Enum):
    CHARGE = "CHARGE"
    REFUND = "REFUND"


# targets that give the reserved stock back
RESTORING_STATUSES = (OrderStatus.CANCELLED, OrderStatus.REJECTED)

ADMIN_ROLES = (Role.SUPER_ADMIN, Role.ADMIN)

ALLOWED_TRANSITIONS = {
    Role.USER: {OrderStatus.CANCELLED},
    Role.VENDOR: {OrderStatus.REJECTED, OrderStatus.APPROVED},
    Role.ADMIN: set(OrderStatus),
    Role.SUPER_ADMIN: set(OrderStatus),
}
