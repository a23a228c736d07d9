from models.menu_management import MenuItem
from models.table_management import Table
from models.order_management import Order, OrderItem
from models.session import TableSession, SessionDevice
from models.feedback import Feedback

# Register all models
__all__ = ['MenuItem', 'Table', 'Order', 'OrderItem', 'TableSession', 'SessionDevice', 'Feedback']
