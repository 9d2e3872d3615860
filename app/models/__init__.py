from app.models.auth import Auth, Otp
from app.models.user import User, Admin
from app.models.vendor import Vendor
from app.models.category import Category
from app.models.product import Product
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.payment import Payment
from app.models.order_event import OrderEvent
