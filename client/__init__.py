"""Courier recruitment application core: session, record store, form and views."""
