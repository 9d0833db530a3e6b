"""
Numberman public API.

READ (approved accounts):
    InventoryService.list_phones(actor, ...)        - Filtered phone listing
    InventoryService.list_blocks(actor)             - Block summaries
    InventoryService.list_customers(actor)          - Customer summaries

WRITE (admins):
    InventoryService.apply_transition(actor, action, ids, ...) - Bulk transition
    InventoryService.generate_range(actor, ...)     - Bulk range generation
    InventoryService.set_account_status(actor, ...) - Approval workflow
"""

from numberman.gates import Gates
from numberman.models import Account, PhoneNumber, UsageEvent
from numberman.services import accounts, aggregation, generator, phones, transitions


class InventoryService:
    """
    Numberman public API.

    Every method takes the calling Account (or None) first and runs the
    access gates before touching the store. Uses @classmethod so projects can
    subclass and override single operations.

    READ (approved):
        list_phones, get_phone, phone_history, list_blocks,
        block_activation_date, list_customers, list_customer_phones

    WRITE (admin):
        apply_transition, transition_phone, set_block_activation,
        generate_range, delete_phone, delete_block, edit_history_entry,
        list_accounts, set_account_role, set_account_status
    """

    # ======================================================================
    # READ API
    # ======================================================================

    @classmethod
    def list_phones(
        cls,
        actor: Account | None,
        search: str | None = None,
        status: str | None = None,
        prefix: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        include_history: bool = False,
    ) -> phones.Page:
        """
        Filtered, paginated phone listing.

        With ``include_history`` each returned phone carries its events in a
        ``usage_history`` attribute (one extra query for the whole page).
        """
        Gates.approved(actor)
        page = phones.search(search, status, prefix, limit, offset)
        if include_history:
            grouped = phones.history_for([phone.pk for phone in page.items])
            for phone in page.items:
                phone.usage_history = grouped.get(phone.pk, [])
        return page

    @classmethod
    def get_phone(cls, actor: Account | None, phone_id) -> PhoneNumber:
        Gates.approved(actor)
        return phones.get_or_raise(phone_id)

    @classmethod
    def phone_history(
        cls,
        actor: Account | None,
        phone_id,
        limit: int | None = None,
        offset: int | None = None,
    ) -> phones.Page:
        Gates.approved(actor)
        phones.get_or_raise(phone_id)
        return phones.history(phone_id, limit, offset)

    @classmethod
    def list_blocks(cls, actor: Account | None) -> list[aggregation.BlockSummary]:
        Gates.approved(actor)
        return aggregation.compute_blocks()

    @classmethod
    def block_activation_date(cls, actor: Account | None, prefix: str):
        Gates.approved(actor)
        return aggregation.block_activation_date(prefix)

    @classmethod
    def list_customers(cls, actor: Account | None) -> list[aggregation.CustomerSummary]:
        Gates.approved(actor)
        return aggregation.compute_customers()

    @classmethod
    def list_customer_phones(
        cls, actor: Account | None, client_name: str
    ) -> list[aggregation.CustomerPhone]:
        Gates.approved(actor)
        return aggregation.customer_phones(client_name)

    # ======================================================================
    # WRITE API
    # ======================================================================

    @classmethod
    def apply_transition(
        cls,
        actor: Account | None,
        action: str,
        ids,
        client_name: str | None = None,
        notes: str | None = None,
        date=None,
    ) -> transitions.TransitionResult:
        """
        Apply one action to a set of phones, all or nothing.

        Args:
            action: assign, deassign, reassign or activation
            ids: Phone ids
            client_name: Required for assign/reassign
            notes: Stored on every created event
            date: Required for activation
        """
        Gates.admin(actor)
        transition = transitions.transition_from_action(action, client_name, notes, date)
        return transitions.apply(transition, ids)

    @classmethod
    def transition_phone(
        cls,
        actor: Account | None,
        phone_id,
        action: str,
        client_name: str | None = None,
        notes: str | None = None,
        date=None,
    ) -> PhoneNumber:
        Gates.admin(actor)
        transition = transitions.transition_from_action(action, client_name, notes, date)
        return transitions.transition_phone(phone_id, transition)

    @classmethod
    def set_block_activation(
        cls, actor: Account | None, prefix: str, date, notes: str | None = None
    ) -> transitions.TransitionResult:
        Gates.admin(actor)
        return transitions.set_activation(prefix, date, notes)

    @classmethod
    def generate_range(
        cls,
        actor: Account | None,
        prefix: str | None = None,
        range_spec: str | None = None,
    ) -> generator.GenerationResult:
        Gates.admin(actor)
        return generator.generate(prefix=prefix, range_spec=range_spec)

    @classmethod
    def delete_phone(cls, actor: Account | None, phone_id) -> None:
        Gates.admin(actor)
        phones.delete(phone_id)

    @classmethod
    def delete_block(cls, actor: Account | None, prefix: str) -> int:
        Gates.admin(actor)
        return phones.delete_block(prefix)

    @classmethod
    def edit_history_entry(cls, actor: Account | None, history_id, new_date) -> UsageEvent:
        Gates.admin(actor)
        return transitions.edit_history_date(history_id, new_date)

    # ======================================================================
    # ACCOUNTS
    # ======================================================================

    @classmethod
    def list_accounts(cls, actor: Account | None) -> list[Account]:
        Gates.admin(actor)
        return accounts.list_accounts()

    @classmethod
    def set_account_role(cls, actor: Account | None, account_id, role: str) -> Account:
        return accounts.set_role(actor, account_id, role)

    @classmethod
    def set_account_status(cls, actor: Account | None, account_id, status: str) -> Account:
        return accounts.set_status(actor, account_id, status)
