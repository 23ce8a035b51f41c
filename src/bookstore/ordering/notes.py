"""Internal notes kept by store staff."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from bookstore.domain import bookstore
from bookstore.ordering.order import Order


@bookstore.command(part_of="Order")
class UpdateAdminNotes:
    order_id = Identifier(required=True)
    admin_notes = String(max_length=1000)


@bookstore.command_handler(part_of=Order)
class AdminNotesHandler:
    @handle(UpdateAdminNotes)
    def update_admin_notes(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_admin_notes(command.admin_notes)
        repo.add(order)
