"""Utility helpers for Sponsor Watch."""
