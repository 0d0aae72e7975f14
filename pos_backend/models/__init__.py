from pos_backend.models.dining_table import DiningTable
from pos_backend.models.product import Product
from pos_backend.models.order import Order, OrderStatus, OrderType, TERMINAL_STATUSES
from pos_backend.models.order_item import OrderItem, OrderItemStatus
from pos_backend.models.payment import Payment, PaymentMethod, PaymentStatus
from pos_backend.models.order_status_history import OrderStatusHistory
from pos_backend.models.order_number_sequence import OrderNumberSequence
