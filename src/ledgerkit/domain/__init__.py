"""Domain layer for ledgerkit."""
