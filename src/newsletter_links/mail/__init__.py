"""Mailbox bookkeeping for processed newsletters."""
