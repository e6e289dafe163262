"""Payments module - school settlement accounts, Paystack webhook and transfers."""
