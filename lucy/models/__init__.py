# lucy/models/__init__.py

# 1. Base de datos (Origen de la clase declarativa)
from lucy.database import Base

# 2. Usuarios
from .users import User, Role

# 3. Clientes
from .clients import Client, ClientHistory

# 4. Catálogo: servicios y productos
from .services import Service
from .products import Product, StockMovement, StockMovementType, INBOUND_MOVEMENTS

# 5. Agenda
from .appointments import Appointment, AppointmentStatus

# 6. Ventas y Caja
from .sales import Sale, SaleItem, SaleCounter, PaymentMethod, SaleStatus
from .cash import CashRegister, CashMovement, CashRegisterStatus, CashMovementType

# 7. Avisos
from .notifications import Notification, NotificationType, NotificationPriority
