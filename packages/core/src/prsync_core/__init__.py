"""Diff position mapping and review-comment reconciliation for prsync."""
