"""Reconciliation and change-classification engine for branch listings."""
