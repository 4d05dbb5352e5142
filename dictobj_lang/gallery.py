"""The vending machine and the tree, built without Python classes.

``make_vending_machine`` keeps its state in closure cells: nothing outside
the three returned operations can touch ``balance`` or ``stock``, but every
machine allocates its own three closures. ``VendingMachine`` is the same
machine on a shared operation table; the functions exist once and each
instance is only a mapping of fields.
"""

from typing import Any, Iterable

from .objects import DispatchObject, OperationTable


def _dispense(product: str, balance: int, price: int) -> str:
    change = balance - price
    if change:
        return f"Here is your {product} and ${change} change."
    return f"Here is your {product}."


def make_vending_machine(product: str, price: int) -> DispatchObject:
    balance = 0
    stock = 0

    def vend():
        nonlocal balance, stock
        if stock == 0:
            return "Machine is out of stock."
        if balance < price:
            return f"You must add ${price - balance} more funds."
        message = _dispense(product, balance, price)
        balance = 0
        stock -= 1
        return message

    def add_funds(amount):
        nonlocal balance
        if stock == 0:
            return f"Machine is out of stock. Here is your ${amount}."
        balance += amount
        return f"Current balance: ${balance}"

    def restock(amount):
        nonlocal stock
        stock += amount
        return f"Current {product} stock: {stock}"

    return DispatchObject(fields={"vend": vend, "add_funds": add_funds, "restock": restock})


VendingMachine = OperationTable("VendingMachine")


@VendingMachine.define(name="__init__")
def _vending_machine_init(self, product: str, price: int) -> None:
    self.product = product
    self.price = price
    self.balance = 0
    self.stock = 0


@VendingMachine.define
def vend(self) -> str:
    if self.stock == 0:
        return "Machine is out of stock."
    if self.balance < self.price:
        return f"You must add ${self.price - self.balance} more funds."
    message = _dispense(self.product, self.balance, self.price)
    self.balance = 0
    self.stock -= 1
    return message


@VendingMachine.define
def add_funds(self, amount: int) -> str:
    if self.stock == 0:
        return f"Machine is out of stock. Here is your ${amount}."
    self.balance += amount
    return f"Current balance: ${self.balance}"


@VendingMachine.define
def restock(self, amount: int) -> str:
    self.stock += amount
    return f"Current {self.product} stock: {self.stock}"


Tree = OperationTable("Tree")


@Tree.define(name="__init__")
def _tree_init(self, label: Any, branches: Iterable[DispatchObject] = ()) -> None:
    self.label = label
    self.branches = list(branches)


@Tree.define
def is_leaf(self) -> bool:
    return not self.branches
