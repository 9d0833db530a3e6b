"""
Django Numberman - Phone Number Inventory.

Usage:
    from numberman import InventoryService
    from numberman.gates import Gates, GateResult

    blocks = InventoryService.list_blocks(account)
    InventoryService.apply_transition(admin, "assign", ids, client_name="ACME")
    InventoryService.generate_range(admin, prefix="03612812XX")

    # Gates validation
    Gates.approved(account)
    Gates.not_self(admin, target_id)
"""


def __getattr__(name):
    if name == "InventoryService":
        from numberman.service import InventoryService

        return InventoryService
    if name == "Gates":
        from numberman.gates import Gates

        return Gates
    if name == "GateResult":
        from numberman.gates import GateResult

        return GateResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["InventoryService", "Gates", "GateResult"]
__version__ = "0.1.0"
