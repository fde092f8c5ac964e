"""
Points ledger core for GrumbleJar.

Balance, transaction log, manual ordering, undo slot and retention.
"""

from grumblejar.ledger.undo import CreditUndo, DeletionUndo, UndoController
from grumblejar.ledger.items import ItemKind

__all__ = ["CreditUndo", "DeletionUndo", "UndoController", "ItemKind"]
