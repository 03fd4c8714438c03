"""Adapters implementing the QAT plugin ports."""
