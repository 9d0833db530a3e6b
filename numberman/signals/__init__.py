"""
Numberman signals: public event API.

Emitted signals (always after the unit of work committed):
- phones_generated: Emitted by services.generator.generate()
- phones_transitioned: Emitted by services.transitions for every applied transition
- phones_deleted: Emitted by services.phones.delete() / delete_block()
- account_created: Emitted by services.accounts.sign_in() for new accounts
- account_updated: Emitted by services.accounts.set_role() / set_status()
"""

from django.dispatch import Signal

# Inventory signals
phones_generated = Signal()  # sender=PhoneNumber, result=GenerationResult
phones_transitioned = Signal()  # sender=PhoneNumber, transition=Transition, phone_ids=list
phones_deleted = Signal()  # sender=PhoneNumber, count=int, prefix=str|None

# Account signals
account_created = Signal()  # sender=Account, account=Account
account_updated = Signal()  # sender=Account, account=Account, changes=dict
