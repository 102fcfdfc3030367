from secure_labs.types import LabUser, Order

DEFAULT_USERS = [
    LabUser(id=1, name="Alice", role="customer", department="north"),
    LabUser(id=2, name="Bob", role="customer", department="south"),
    LabUser(id=3, name="Charlie", role="support", department="north"),
]

DEFAULT_ORDERS = [
    Order(id=1, user_id=1, item="Laptop", region="north", total=2000),
    Order(id=2, user_id=1, item="Mouse", region="north", total=40),
    Order(id=3, user_id=2, item="Monitor", region="south", total=300),
    Order(id=4, user_id=2, item="Keyboard", region="south", total=60),
]


class OrderStore:
    """Read-only users and orders for the access-control lab."""

    def __init__(self, users: list[LabUser] | None = None, orders: list[Order] | None = None):
        self._users = {user.id: user for user in (DEFAULT_USERS if users is None else users)}
        self._orders = {order.id: order for order in (DEFAULT_ORDERS if orders is None else orders)}

    def get_user(self, user_id: int) -> LabUser | None:
        return self._users.get(user_id)

    def get_order(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)
