"""Arcane Ledger: card collection and deck tracker with a spreadsheet store."""
