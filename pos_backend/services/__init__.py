from pos_backend.services.audit_trail import AuditTrail
from pos_backend.services.catalog import ProductSnapshot, SqlProductCatalog, StaticRestaurantSettings
from pos_backend.services.table_occupancy import TableOccupancyTracker
from pos_backend.services.order_numbers import OrderNumberGenerator
from pos_backend.services.order_status import OrderStatusMachine
from pos_backend.services.order_service import OrderService
from pos_backend.services.payment_ledger import PaymentLedger
